# Central API router include file
from fastapi import APIRouter

from portfolio_api.contact.router import router as contact_router
from portfolio_api.health.router import router as health_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(contact_router)
