from fastapi import APIRouter

from api.routers.system import SystemRoutesManager
from scalar_fastapi import get_scalar_api_reference

router = APIRouter()

SRM = SystemRoutesManager()


@router.get("/check-health", include_in_schema=False)
def check_health():
    return {"ok": True}


@router.get("/scalar", include_in_schema=False)
def get_scalar():
    app = SRM.get_app()

    return get_scalar_api_reference(
        title=app.title,
        openapi_url=app.openapi_url,
    )
