"""
Schemas de resultado del ledger: errores tipados, outcomes y resúmenes.
"""

import enum
from typing import Any

from pydantic import BaseModel, FiniteFloat

from cotizaciones.schemas.common import CamelModel
from cotizaciones.schemas.quotation import (
    PaymentCandidate,
    PaymentRecord,
    Quotation,
    QuotationStatus,
    ServiceLine,
    CommissionValue,
)


class LedgerErrorCode(str, enum.Enum):
    """Reglas que el ledger puede rechazar."""
    INVALID_AMOUNT = "InvalidAmount"
    EXCEEDS_PENDING_TOTAL = "ExceedsPendingTotal"
    MIXED_AMOUNT_MISMATCH = "MixedAmountMismatch"
    COMMISSION_EXCEEDS_PAYMENT = "CommissionExceedsPayment"
    COMMISSION_EXCEEDS_DOCTOR_PENDING = "CommissionExceedsDoctorPending"
    PERCENTAGE_OUT_OF_RANGE = "PercentageOutOfRange"
    AMOUNT_EXCEEDS_SERVICE_SUBTOTAL = "AmountExceedsServiceSubtotal"
    INVALID_QUANTITY = "InvalidQuantity"
    # Validación del borrador antes de enviarlo
    INCOMPLETE_QUOTATION = "IncompleteQuotation"
    COMMISSION_EXCEEDS_SERVICE_SUBTOTAL = "CommissionExceedsServiceSubtotal"
    # Referencias por id que no existen
    UNKNOWN_SERVICE = "UnknownService"
    UNKNOWN_DOCTOR = "UnknownDoctor"


class LedgerError(CamelModel):
    code: LedgerErrorCode
    message: str
    doctor_id: str | None = None


class LedgerOutcome(BaseModel):
    """Resultado discriminado: ``value`` si se aceptó, ``error`` si se rechazó."""
    value: Any = None
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PaymentApplied(CamelModel):
    payment: PaymentRecord
    status: QuotationStatus
    pending_amount: int


# ── Resumen de cotización ────────────────


class DoctorCommissionSummary(CamelModel):
    doctor_id: str
    earned: int
    paid: int
    pending: int
    percentage_of_total: float


class QuotationSummary(CamelModel):
    quotation_id: str
    total: int
    total_commissions: int
    total_net: int
    paid_amount: int
    pending_amount: int
    status: QuotationStatus
    doctors: list[DoctorCommissionSummary] = []


# ── Requests del API ─────────────────────


class PaymentRequest(CamelModel):
    quotation: Quotation
    payment: PaymentCandidate
    payment_id: str | None = None


class PaymentResponse(CamelModel):
    quotation: Quotation
    payment: PaymentRecord
    summary: QuotationSummary


class SplitSuggestionRequest(CamelModel):
    quotation: Quotation
    amount: FiniteFloat


class CommissionUpdateRequest(CamelModel):
    service: ServiceLine
    doctor_id: str
    value: CommissionValue


class CommissionToggleRequest(CamelModel):
    service: ServiceLine
    doctor_id: str


class PricingUpdateRequest(CamelModel):
    service: ServiceLine
    unit_price: FiniteFloat | None = None
    quantity: FiniteFloat | None = None


class DraftValidationResponse(CamelModel):
    valid: bool = True
    total: int
    total_commissions: int
    total_net: int
