from fastapi import APIRouter
from registrar.api.v1 import (
    pre_register,
    companies,
    groups,
    company_names,
    settings,
)

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(pre_register.router, prefix="/pre-register", tags=["pre-register"])
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
api_router.include_router(company_names.router, prefix="/company-names", tags=["company-names"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
