"""
Ledger de cotizaciones: subtotales, comisiones por doctor y pagos parciales.

Funciones puras sobre una Quotation que pertenece al llamador. Las únicas
mutaciones son agregar un pago validado a ``quotation.payments`` y actualizar
una línea de servicio cuando el cambio fue aceptado; un rechazo deja todo
intacto y se devuelve como ``LedgerOutcome`` con el código de la regla.

El llamador debe serializar ``validate_and_append_payment`` por cotización:
este módulo no guarda estado entre llamadas ni usa locks.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from cotizaciones.core.money import round_amount, to_decimal
from cotizaciones.schemas.ledger import (
    DoctorCommissionSummary,
    LedgerError,
    LedgerErrorCode,
    LedgerOutcome,
    PaymentApplied,
    QuotationSummary,
)
from cotizaciones.schemas.quotation import (
    CommissionAllocation,
    CommissionMode,
    CommissionValue,
    PaymentCandidate,
    PaymentMethod,
    PaymentRecord,
    Quotation,
    QuotationStatus,
    ServiceLine,
)

logger = logging.getLogger(__name__)

MIXED_PAYMENT_TOLERANCE = Decimal("0.01")


# ── Helpers ──────────────────────────────


def reject(
    code: LedgerErrorCode, message: str, doctor_id: str | None = None
) -> LedgerOutcome:
    logger.warning("Rechazo del ledger: code=%s doctor=%s", code.value, doctor_id)
    return LedgerOutcome(
        error=LedgerError(code=code, message=message, doctor_id=doctor_id)
    )


def accept(value) -> LedgerOutcome:
    return LedgerOutcome(value=value)


def _find_allocation(
    service: ServiceLine, doctor_id: str
) -> CommissionAllocation | None:
    for allocation in service.commissions:
        if allocation.doctor_id == doctor_id:
            return allocation
    return None


def _is_whole_number(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


# ── Subtotales y totales ─────────────────


def compute_service_subtotal(service: ServiceLine) -> int:
    """Subtotal de la línea: precio unitario × cantidad, redondeado."""
    return round_amount(to_decimal(service.unit_price) * service.quantity)


def compute_total(quotation: Quotation) -> int:
    return sum(compute_service_subtotal(s) for s in quotation.services)


def compute_total_commissions(quotation: Quotation) -> int:
    return sum(
        allocation.amount
        for service in quotation.services
        for allocation in service.commissions
    )


def compute_total_net(quotation: Quotation) -> int:
    return compute_total(quotation) - compute_total_commissions(quotation)


# ── Comisiones por doctor ────────────────


def compute_doctor_commission_totals(quotation: Quotation) -> dict[str, int]:
    """
    Comisión ganada por cada doctor en toda la cotización.

    Cada monto se redondea al sumarlo, no una sola vez al final; la suma de
    estos valores puede diferir de ``compute_total_commissions`` hasta en una
    unidad por asignación.
    """
    totals: dict[str, int] = {}
    for service in quotation.services:
        for allocation in service.commissions:
            totals[allocation.doctor_id] = (
                totals.get(allocation.doctor_id, 0) + round_amount(allocation.amount)
            )
    return totals


def compute_doctor_commission_percentage_of_total(
    quotation: Quotation, doctor_id: str
) -> float:
    """Porcentaje informativo del total que corresponde al doctor."""
    total = compute_total(quotation)
    if total == 0:
        return 0.0
    doctor_total = compute_doctor_commission_totals(quotation).get(doctor_id, 0)
    return 100 * doctor_total / total


def compute_paid_commissions_per_doctor(quotation: Quotation) -> dict[str, int]:
    paid: dict[str, int] = {}
    for payment in quotation.payments:
        for doctor_id, amount in payment.doctor_commissions.items():
            paid[doctor_id] = paid.get(doctor_id, 0) + amount
    return paid


def compute_pending_commissions_per_doctor(quotation: Quotation) -> dict[str, int]:
    """Comisión pendiente por doctor; omite doctores sin comisión ganada."""
    earned = compute_doctor_commission_totals(quotation)
    paid = compute_paid_commissions_per_doctor(quotation)

    pending: dict[str, int] = {}
    for doctor_id, total in earned.items():
        if total == 0:
            continue
        pending[doctor_id] = max(0, total - paid.get(doctor_id, 0))
    return pending


# ── Pagos ────────────────────────────────


def compute_paid_amount(quotation: Quotation) -> int:
    return sum(payment.amount for payment in quotation.payments)


def compute_pending_amount(quotation: Quotation) -> int:
    return max(0, compute_total(quotation) - compute_paid_amount(quotation))


def compute_status(quotation: Quotation) -> QuotationStatus:
    if compute_pending_amount(quotation) > 0:
        return QuotationStatus.PENDING
    return QuotationStatus.COMPLETED


def normalize_payment_channels(candidate: PaymentCandidate) -> PaymentCandidate:
    """Efectivo y QR llevan todo el monto por su canal; Mixto conserva lo ingresado."""
    if candidate.payment_method == PaymentMethod.CASH:
        cash, qr = candidate.amount, 0
    elif candidate.payment_method == PaymentMethod.QR:
        cash, qr = 0, candidate.amount
    else:
        return candidate
    return candidate.model_copy(update={"cash_amount": float(cash), "qr_amount": float(qr)})


def suggest_payment_split(quotation: Quotation, proposed_amount) -> dict[str, int]:
    """
    Reparto sugerido de un pago entre las comisiones pendientes.

    Proporcional a la participación de cada doctor en el total, sin superar
    nunca lo que aún se le debe. Solo sirve para precargar el formulario.
    """
    total = compute_total(quotation)
    earned = compute_doctor_commission_totals(quotation)
    pending = compute_pending_commissions_per_doctor(quotation)
    proposed = to_decimal(proposed_amount)

    suggestion: dict[str, int] = {}
    for doctor_id, pending_amount in pending.items():
        if pending_amount <= 0:
            continue
        if total == 0:
            suggested = 0
        else:
            suggested = round_amount(proposed * earned[doctor_id] / total)
        suggestion[doctor_id] = max(0, min(suggested, pending_amount))
    return suggestion


def validate_and_append_payment(
    quotation: Quotation,
    candidate: PaymentCandidate,
    payment_id: str | None = None,
    paid_at: datetime | None = None,
) -> LedgerOutcome:
    """
    Valida un pago y, si pasa todas las reglas, lo agrega a la cotización.

    Las reglas se evalúan en orden y se detiene en la primera que falla.
    ``payment_id`` y ``paid_at`` los asigna quien persiste el pago; si no se
    indican se usa un UUID nuevo y la hora actual en UTC.
    Efectivo y QR se registran con todo el monto en su canal.
    """
    candidate = normalize_payment_channels(candidate)
    amount = candidate.amount
    if amount <= 0:
        return reject(
            LedgerErrorCode.INVALID_AMOUNT,
            "El monto debe ser mayor a 0",
        )

    pending_amount = compute_pending_amount(quotation)
    if amount > pending_amount:
        return reject(
            LedgerErrorCode.EXCEEDS_PENDING_TOTAL,
            f"El monto ({amount}) excede el saldo pendiente ({pending_amount})",
        )

    if candidate.payment_method == PaymentMethod.MIXED:
        mixed_total = to_decimal(candidate.cash_amount) + to_decimal(candidate.qr_amount)
        if abs(mixed_total - amount) >= MIXED_PAYMENT_TOLERANCE:
            return reject(
                LedgerErrorCode.MIXED_AMOUNT_MISMATCH,
                "La suma de efectivo y QR debe ser igual al monto total",
            )

    commissions_total = sum(candidate.doctor_commissions.values())
    if commissions_total > amount:
        return reject(
            LedgerErrorCode.COMMISSION_EXCEEDS_PAYMENT,
            "Las comisiones no pueden superar el monto del pago",
        )

    pending_commissions = compute_pending_commissions_per_doctor(quotation)
    for doctor_id, proposed in candidate.doctor_commissions.items():
        max_amount = pending_commissions.get(doctor_id, 0)
        if proposed > max_amount:
            return reject(
                LedgerErrorCode.COMMISSION_EXCEEDS_DOCTOR_PENDING,
                f"La comisión excede lo pendiente del doctor (máximo {max_amount})",
                doctor_id=doctor_id,
            )

    record = PaymentRecord(
        id=payment_id or str(uuid4()),
        date=paid_at or datetime.now(timezone.utc),
        **candidate.model_dump(),
    )
    quotation.payments.append(record)

    status = compute_status(quotation)
    remaining = compute_pending_amount(quotation)
    logger.info(
        "Pago registrado: quotation=%s amount=%s method=%s pendiente=%s estado=%s",
        quotation.id, amount, candidate.payment_method.value, remaining, status.value,
    )
    return accept(PaymentApplied(payment=record, status=status, pending_amount=remaining))


def summarize_quotation(quotation: Quotation) -> QuotationSummary:
    """Totales derivados de la cotización y el estado de comisiones por doctor."""
    total = compute_total(quotation)
    total_commissions = compute_total_commissions(quotation)
    earned = compute_doctor_commission_totals(quotation)
    paid = compute_paid_commissions_per_doctor(quotation)
    pending = compute_pending_commissions_per_doctor(quotation)

    doctors = [
        DoctorCommissionSummary(
            doctor_id=doctor_id,
            earned=earned_amount,
            paid=paid.get(doctor_id, 0),
            pending=pending.get(doctor_id, 0),
            percentage_of_total=(100 * earned_amount / total) if total else 0.0,
        )
        for doctor_id, earned_amount in earned.items()
    ]

    return QuotationSummary(
        quotation_id=quotation.id,
        total=total,
        total_commissions=total_commissions,
        total_net=total - total_commissions,
        paid_amount=compute_paid_amount(quotation),
        pending_amount=compute_pending_amount(quotation),
        status=compute_status(quotation),
        doctors=doctors,
    )


# ── Asignaciones de comisión ─────────────


def percentage_to_amount(subtotal: int, percentage) -> int:
    return round_amount(to_decimal(subtotal) * to_decimal(percentage) / 100)


def amount_to_percentage(subtotal: int, amount) -> int:
    if subtotal <= 0:
        return 0
    return round_amount(100 * to_decimal(amount) / subtotal)


def update_commission_allocation(
    service: ServiceLine,
    doctor_id: str,
    value: CommissionValue,
) -> LedgerOutcome:
    """
    Fija la comisión de un doctor en una línea, como porcentaje o monto fijo.

    Se rechaza cualquier valor que deje la suma de comisiones de la línea por
    encima de su subtotal.
    """
    allocation = _find_allocation(service, doctor_id)
    if allocation is None:
        return reject(
            LedgerErrorCode.UNKNOWN_DOCTOR,
            "El doctor no tiene comisión asignada en este servicio",
            doctor_id=doctor_id,
        )

    subtotal = compute_service_subtotal(service)

    if value.mode == CommissionMode.PERCENTAGE:
        if value.value < 0 or value.value > 100:
            return reject(
                LedgerErrorCode.PERCENTAGE_OUT_OF_RANGE,
                "El porcentaje debe estar entre 0% y 100%",
                doctor_id=doctor_id,
            )
        amount = percentage_to_amount(subtotal, value.value)
        percentage = round_amount(value.value)
    else:
        if value.value < 0 or value.value > subtotal:
            return reject(
                LedgerErrorCode.AMOUNT_EXCEEDS_SERVICE_SUBTOTAL,
                f"El monto no puede exceder Bs. {subtotal}",
                doctor_id=doctor_id,
            )
        amount = round_amount(value.value)
        percentage = amount_to_percentage(subtotal, amount)

    others = sum(c.amount for c in service.commissions if c is not allocation)
    if others + amount > subtotal:
        return reject(
            LedgerErrorCode.AMOUNT_EXCEEDS_SERVICE_SUBTOTAL,
            "Las comisiones no pueden superar el total del servicio",
            doctor_id=doctor_id,
        )

    allocation.mode = value.mode
    allocation.amount = amount
    allocation.percentage = percentage
    return accept(service)


def toggle_commission_mode(service: ServiceLine, doctor_id: str) -> LedgerOutcome:
    """Alterna porcentaje ↔ monto fijo conservando el monto."""
    allocation = _find_allocation(service, doctor_id)
    if allocation is None:
        return reject(
            LedgerErrorCode.UNKNOWN_DOCTOR,
            "El doctor no tiene comisión asignada en este servicio",
            doctor_id=doctor_id,
        )

    if allocation.mode == CommissionMode.PERCENTAGE:
        allocation.mode = CommissionMode.FIXED_AMOUNT
    else:
        allocation.mode = CommissionMode.PERCENTAGE
    allocation.percentage = amount_to_percentage(
        compute_service_subtotal(service), allocation.amount
    )
    return accept(service)


def update_service_pricing(
    service: ServiceLine,
    unit_price=None,
    quantity=None,
) -> LedgerOutcome:
    """
    Cambia precio y/o cantidad de una línea y recalcula sus comisiones.

    Las comisiones en porcentaje se recalculan sobre el nuevo subtotal. Las de
    monto fijo conservan su monto por unidad y se escalan con la cantidad.
    """
    if quantity is not None and (not _is_whole_number(quantity) or quantity < 1):
        return reject(
            LedgerErrorCode.INVALID_QUANTITY,
            "La cantidad debe ser un número entero mayor o igual a 1",
        )
    if unit_price is not None and unit_price < 0:
        return reject(
            LedgerErrorCode.INVALID_AMOUNT,
            "El precio no puede ser negativo",
        )

    old_quantity = service.quantity or 1
    new_quantity = int(quantity) if quantity is not None else service.quantity
    new_price = round_amount(unit_price) if unit_price is not None else service.unit_price
    new_subtotal = round_amount(to_decimal(new_price) * new_quantity)

    amounts: list[int] = []
    for allocation in service.commissions:
        if allocation.mode == CommissionMode.PERCENTAGE:
            amounts.append(percentage_to_amount(new_subtotal, allocation.percentage))
        else:
            per_unit = round_amount(to_decimal(allocation.amount) / old_quantity)
            amounts.append(round_amount(per_unit * new_quantity))

    if sum(amounts) > new_subtotal:
        return reject(
            LedgerErrorCode.AMOUNT_EXCEEDS_SERVICE_SUBTOTAL,
            "Las comisiones no pueden superar el total del servicio",
        )

    service.unit_price = new_price
    service.quantity = new_quantity
    for allocation, amount in zip(service.commissions, amounts):
        allocation.amount = amount
        if allocation.mode == CommissionMode.FIXED_AMOUNT:
            allocation.percentage = amount_to_percentage(new_subtotal, amount)
    return accept(service)
