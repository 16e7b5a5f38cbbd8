from fastapi import APIRouter

from src.app.api.v1 import buildings, deletion_requests

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(deletion_requests.router)
api_router.include_router(buildings.router)
