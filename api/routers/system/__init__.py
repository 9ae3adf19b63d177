class SystemRoutesManager:
    def __init__(self):
        self.api_manager = None

    def get_app(self):
        if self.api_manager is None:
            from api.app import FastAPIManager
            self.api_manager = FastAPIManager()
        return self.api_manager.get_app()
