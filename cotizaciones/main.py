"""
Aplicación FastAPI del ledger de cotizaciones.
Sin base de datos ni sesiones: cada request trae la cotización completa.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cotizaciones.api.v1.router import api_v1_router
from cotizaciones.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "%s %s (%s), moneda %s",
        settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV, settings.CURRENCY_LABEL,
    )
    yield
    logger.info("%s detenido", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description=(
        f"Cotizaciones de {settings.BUSINESS_NAME}: totales, comisiones por doctor "
        "y pagos parciales."
    ),
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Solo GET y POST, sin cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


# ── Errores ──────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def malformed_quotation_handler(request: Request, exc: RequestValidationError):
    """Registra cotizaciones o pagos mal formados y responde el 422 estándar."""
    logger.warning(
        "Cuerpo inválido en %s: %d error(es)", request.url.path, len(exc.errors())
    )
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Errores no previstos: 500 sin detalles salvo en DEBUG."""
    logger.exception("Error no manejado en %s %s", request.method, request.url.path)
    content = {"detail": "Error interno del servidor"}
    if settings.DEBUG:
        content = {"detail": str(exc), "type": type(exc).__name__}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.APP_ENV,
        "business": settings.BUSINESS_NAME,
        "currency": settings.CURRENCY_LABEL,
        "apiPrefix": settings.API_V1_PREFIX,
    }
