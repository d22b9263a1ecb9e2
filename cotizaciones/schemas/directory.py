"""Schemas del directorio de doctores y especialidades (solo lectura)."""

import enum

from pydantic import Field

from cotizaciones.schemas.common import CamelModel, NonNegativeAmount


class DoctorPaymentType(str, enum.Enum):
    """Forma de pago del doctor."""
    COMMISSION = "comision"
    SALARY = "sueldo"


class Doctor(CamelModel):
    id: str
    name: str = ""
    specialty_ids: list[str] = []
    payment_type: DoctorPaymentType = DoctorPaymentType.SALARY


class CatalogService(CamelModel):
    id: str
    name: str
    price: NonNegativeAmount = Field(0, description="Precio de lista en Bs.")


class Specialty(CamelModel):
    id: str
    name: str
    services: list[CatalogService] = []
