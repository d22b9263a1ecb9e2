"""
Excepciones HTTP personalizadas para la API.
"""

from fastapi import HTTPException, status

from cotizaciones.schemas.ledger import LedgerError


class ValidationException(HTTPException):
    """Error de validación de negocio (422)."""

    def __init__(self, detail: str | dict = "Error de validación"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class LedgerRejectedException(ValidationException):
    """Rechazo del ledger de cotizaciones (422) con código de regla."""

    def __init__(self, error: LedgerError):
        self.error = error
        super().__init__(detail=error.model_dump(by_alias=True, exclude_none=True))
