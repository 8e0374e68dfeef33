from fastapi import APIRouter

from app.api.routes import superlatives

api_router = APIRouter()
api_router.include_router(superlatives.router)
