from fastapi import Depends, FastAPI
import uvicorn
from api.routers.system import routes as SystemRoutes
from api.routers.payments import routes as PaymentRoutes
from api.routers.ledger import routes as LedgerRoutes
from api.security import require_service_key


class FastAPIManager:
    def __init__(self):
        self.api = FastAPI(
            version="1.0.0",
            title="Split ledger",
            description=(
                "Splits the proceeds of paid sales between tenant, affiliates and the platform fee, "
                "and reverses the liable portions on refunds and chargebacks. "
                "Every posting is idempotent, so gateway webhook retries are safe."
            ),
        )
        self.add_routers()

    def add_routers(self):
        self.api.include_router(
            SystemRoutes.router
        )
        self.api.include_router(
            PaymentRoutes.router,
            prefix="/payments",
            dependencies=[Depends(require_service_key)],
        )
        self.api.include_router(
            LedgerRoutes.router,
            prefix="/ledger",
            dependencies=[Depends(require_service_key)],
            tags=["Ledger"]
        )

    def start_server(self):
        uvicorn.run(self.api, host="0.0.0.0", port=8000)

    def get_app(self) -> FastAPI:
        return self.api
