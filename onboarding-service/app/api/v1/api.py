"""
V1 API router aggregation.

All versioned endpoint routers are mounted here under a common prefix.
The top-level ``main.py`` mounts this router at ``/api/v1``.  Every route
requires an identified caller; reviewer-only routes check the role
themselves.
"""

from fastapi import APIRouter, Depends

from app.api.v1.endpoints import accreditation, beneficiaries, general_info, investors
from app.core.security import get_current_user

api_router = APIRouter(dependencies=[Depends(get_current_user)])

api_router.include_router(investors.router, prefix="/investors", tags=["Investors"])
api_router.include_router(general_info.router, prefix="/general-info", tags=["General Info"])
api_router.include_router(beneficiaries.router, prefix="/beneficiaries", tags=["Beneficiaries"])
api_router.include_router(accreditation.router, prefix="/accreditation", tags=["Accreditation"])
