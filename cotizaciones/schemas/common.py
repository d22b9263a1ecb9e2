"""
Base común de schemas: atributos snake_case, JSON camelCase.

El backend REST y el frontend intercambian ``serviceId``, ``doctorId``,
``cashAmount``…; los schemas aceptan ambas formas al validar y emiten camelCase
al serializar con ``by_alias=True``.
"""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cotizaciones.core.money import round_amount


def _coerce_amount(value):
    # El backend envía montos como texto ("120.00")
    if value is None or value == "":
        return 0
    return round_amount(value)


# Monto entero en Bs.; puede ser negativo para que el ledger lo rechace con su propio código
Amount = Annotated[int, BeforeValidator(_coerce_amount)]

NonNegativeAmount = Annotated[int, BeforeValidator(_coerce_amount), Field(ge=0)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        serialize_by_alias=True,
    )
