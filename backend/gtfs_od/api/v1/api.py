"""API v1 router"""

from fastapi import APIRouter

from gtfs_od.api.v1.endpoints import compiler, overrides, patterns, restrictions

api_router = APIRouter()

# Include pattern group endpoints (matrix editor aggregation and bulk edits)
api_router.include_router(patterns.router, prefix="/patterns", tags=["od-patterns"])

# Include restriction map maintenance endpoints
api_router.include_router(restrictions.router, prefix="/restrictions", tags=["od-restrictions"])

# Include OD compiler endpoints
api_router.include_router(compiler.router, prefix="/compiler", tags=["od-compiler"])

# Include overrides import/export endpoints
api_router.include_router(overrides.router, prefix="/overrides", tags=["od-overrides"])
