"""
Router principal de la API v1.
Agrupa todos los sub-routers de la versión 1.
"""

from fastapi import APIRouter

from cotizaciones.api.v1.quotations import router as quotations_router

api_v1_router = APIRouter()

api_v1_router.include_router(
    quotations_router,
    prefix="/quotations",
    tags=["Cotizaciones"],
)
