"""
Endpoints REST del ledger de cotizaciones.

Sin estado: cada request trae la cotización completa tal como la entrega el
backend y recibe el resultado calculado. Los rechazos del ledger salen como 422
con ``{code, message, doctorId}``.
"""

from fastapi import APIRouter

from cotizaciones.core.exceptions import LedgerRejectedException
from cotizaciones.schemas.document import QuotationDocument
from cotizaciones.schemas.ledger import (
    CommissionToggleRequest,
    CommissionUpdateRequest,
    DraftValidationResponse,
    LedgerOutcome,
    PaymentRequest,
    PaymentResponse,
    PricingUpdateRequest,
    QuotationSummary,
    SplitSuggestionRequest,
)
from cotizaciones.schemas.quotation import Quotation, ServiceLine
from cotizaciones.services import document_service, quotation_form_service, quotation_ledger

router = APIRouter()


def _unwrap(outcome: LedgerOutcome):
    if not outcome.ok:
        raise LedgerRejectedException(outcome.error)
    return outcome.value


# ── Resumen ──────────────────────────────


@router.post("/summary", response_model=QuotationSummary)
async def summarize(quotation: Quotation):
    """Totales, saldo pendiente y comisiones por doctor."""
    return quotation_ledger.summarize_quotation(quotation)


@router.post("/validate", response_model=DraftValidationResponse)
async def validate_draft(quotation: Quotation):
    """Valida el borrador antes de crearlo o actualizarlo en el backend."""
    _unwrap(quotation_form_service.validate_quotation_draft(quotation))
    total = quotation_ledger.compute_total(quotation)
    commissions = quotation_ledger.compute_total_commissions(quotation)
    return DraftValidationResponse(
        total=total,
        total_commissions=commissions,
        total_net=total - commissions,
    )


# ── Pagos ────────────────────────────────


@router.post("/payments", response_model=PaymentResponse)
async def register_payment(data: PaymentRequest):
    """Valida el pago y devuelve la cotización con el pago agregado."""
    quotation = data.quotation
    applied = _unwrap(
        quotation_ledger.validate_and_append_payment(
            quotation, data.payment, payment_id=data.payment_id
        )
    )
    return PaymentResponse(
        quotation=quotation,
        payment=applied.payment,
        summary=quotation_ledger.summarize_quotation(quotation),
    )


@router.post("/payments/suggestion", response_model=dict[str, int])
async def suggest_split(data: SplitSuggestionRequest):
    """Reparto sugerido del pago entre las comisiones pendientes."""
    return quotation_ledger.suggest_payment_split(data.quotation, data.amount)


# ── Líneas de servicio ───────────────────


@router.post("/services/commission", response_model=ServiceLine)
async def update_commission(data: CommissionUpdateRequest):
    """Fija la comisión de un doctor como porcentaje o monto fijo."""
    return _unwrap(
        quotation_ledger.update_commission_allocation(
            data.service, data.doctor_id, data.value
        )
    )


@router.post("/services/commission/toggle", response_model=ServiceLine)
async def toggle_commission(data: CommissionToggleRequest):
    """Alterna porcentaje / monto fijo sin cambiar el monto."""
    return _unwrap(
        quotation_ledger.toggle_commission_mode(data.service, data.doctor_id)
    )


@router.post("/services/pricing", response_model=ServiceLine)
async def update_pricing(data: PricingUpdateRequest):
    """Cambia precio y/o cantidad y recalcula comisiones."""
    return _unwrap(
        quotation_ledger.update_service_pricing(
            data.service, unit_price=data.unit_price, quantity=data.quantity
        )
    )


# ── Documento ────────────────────────────


@router.post("/document", response_model=QuotationDocument)
async def quotation_document(quotation: Quotation):
    """Datos estables para generar el PDF de la cotización."""
    return document_service.build_quotation_document(quotation)
