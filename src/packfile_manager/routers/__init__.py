from fastapi import APIRouter

from packfile_manager.routers.entries import router as entries_router
from packfile_manager.routers.packs import router as packs_router
from packfile_manager.routers.tables import router as tables_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(packs_router)
api_router.include_router(entries_router)
api_router.include_router(tables_router)
