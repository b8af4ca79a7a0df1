from fastapi import APIRouter

from geotasker.api.routes import tools

api_router = APIRouter(prefix="/api/v1")


api_router.include_router(tools.router)
