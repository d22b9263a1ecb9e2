"""Schemas Pydantic v2 para Quotation, ServiceLine, CommissionAllocation y pagos."""

import enum
from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, Field, FiniteFloat, field_validator

from cotizaciones.core.money import round_amount
from cotizaciones.schemas.common import Amount, CamelModel, NonNegativeAmount


class CommissionMode(str, enum.Enum):
    """Representación activa de una comisión."""
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixedAmount"


class PaymentMethod(str, enum.Enum):
    """Método de pago de una cotización."""
    CASH = "Efectivo"
    QR = "QR"
    MIXED = "Mixto"


class QuotationStatus(str, enum.Enum):
    """Estado derivado: pendiente mientras quede saldo."""
    PENDING = "pendiente"
    COMPLETED = "completado"


# ── CommissionAllocation ─────────────────


class CommissionAllocation(CamelModel):
    doctor_id: str
    mode: CommissionMode = Field(
        CommissionMode.PERCENTAGE,
        validation_alias=AliasChoices("mode", "commissionType", "commission_type"),
    )
    percentage: int = Field(0, ge=0, le=100, description="Porcentaje del subtotal (0-100)")
    amount: NonNegativeAmount = Field(0, description="Monto de comisión en Bs.")

    @field_validator("mode", mode="before")
    @classmethod
    def _legacy_mode(cls, value):
        # Formato heredado del backend: commissionType = 'amount'
        if value == "amount":
            return CommissionMode.FIXED_AMOUNT
        return value

    @field_validator("percentage", mode="before")
    @classmethod
    def _round_percentage(cls, value):
        if value is None or value == "":
            return 0
        return round_amount(value)


class PercentageValue(CamelModel):
    mode: Literal[CommissionMode.PERCENTAGE] = CommissionMode.PERCENTAGE
    value: FiniteFloat


class FixedAmountValue(CamelModel):
    mode: Literal[CommissionMode.FIXED_AMOUNT] = CommissionMode.FIXED_AMOUNT
    value: FiniteFloat


# Valor ingresado por el usuario para una comisión: porcentaje o monto fijo
CommissionValue = Annotated[
    Union[PercentageValue, FixedAmountValue],
    Field(discriminator="mode"),
]


# ── ServiceLine ──────────────────────────


class ServiceLine(CamelModel):
    service_id: str = ""
    service_name: str = ""
    specialty_id: str = ""
    specialty_name: str = ""
    unit_price: NonNegativeAmount = Field(
        0,
        validation_alias=AliasChoices("unitPrice", "unit_price", "price"),
        description="Precio unitario en Bs.",
    )
    quantity: int = Field(1, ge=1, description="Cantidad, mínimo 1")
    commissions: list[CommissionAllocation] = []


# ── Payments ─────────────────────────────


class PaymentCandidate(CamelModel):
    """Pago propuesto, aún sin id ni fecha."""
    amount: Amount
    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_amount: FiniteFloat = Field(0, ge=0)
    qr_amount: FiniteFloat = Field(0, ge=0)
    doctor_commissions: dict[str, NonNegativeAmount] = {}
    details: str | None = None


class PaymentRecord(PaymentCandidate):
    """Pago registrado; inmutable una vez agregado a la cotización."""
    id: str
    date: datetime


# ── Quotation ────────────────────────────


class Quotation(CamelModel):
    id: str = ""
    client_name: str = ""
    phone: str = ""
    date: date
    services: list[ServiceLine] = []
    payments: list[PaymentRecord] = []

    @field_validator("date", mode="before")
    @classmethod
    def _date_only(cls, value):
        # El backend puede enviar la fecha como timestamp ISO completo
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        if isinstance(value, datetime):
            return value.date()
        return value
