"""
Edición del borrador de una cotización antes de enviarla al backend.

Armado de líneas desde el catálogo, asignación automática de comisiones a
doctores que cobran por comisión, validación previa al envío y reparto de un
pago mixto entre efectivo y QR.
"""

import math

from cotizaciones.core.money import round_amount, to_decimal
from cotizaciones.schemas.directory import Doctor
from cotizaciones.schemas.ledger import LedgerErrorCode, LedgerOutcome
from cotizaciones.schemas.quotation import (
    CommissionAllocation,
    CommissionMode,
    PaymentMethod,
    Quotation,
    ServiceLine,
)
from cotizaciones.services.directory import Directory, earns_commission_on
from cotizaciones.services.quotation_ledger import (
    accept,
    compute_service_subtotal,
    reject,
)


def _empty_allocation(doctor_id: str) -> CommissionAllocation:
    return CommissionAllocation(
        doctor_id=doctor_id, mode=CommissionMode.PERCENTAGE, percentage=0, amount=0
    )


# ── Líneas de servicio ───────────────────


def build_service_line(
    directory: Directory,
    service_id: str,
    selected_doctor_ids: list[str],
    quantity: int = 1,
) -> LedgerOutcome:
    """
    Crea una línea desde el catálogo con una comisión en cero para cada doctor
    seleccionado que cobra por comisión y tiene la especialidad del servicio.
    """
    entry = directory.catalog_entry(service_id)
    if entry is None:
        return reject(
            LedgerErrorCode.UNKNOWN_SERVICE,
            f"Servicio {service_id} no encontrado en el catálogo",
        )
    if quantity < 1:
        return reject(
            LedgerErrorCode.INVALID_QUANTITY,
            "La cantidad no puede ser menor a 1",
        )
    specialty, catalog_service = entry

    commissions = []
    for doctor_id in selected_doctor_ids:
        doctor = directory.doctor(doctor_id)
        if doctor and earns_commission_on(doctor, specialty.id):
            commissions.append(_empty_allocation(doctor_id))

    return accept(ServiceLine(
        service_id=catalog_service.id,
        service_name=catalog_service.name,
        specialty_id=specialty.id,
        specialty_name=specialty.name,
        unit_price=catalog_service.price,
        quantity=quantity,
        commissions=commissions,
    ))


def assign_doctor(quotation: Quotation, doctor: Doctor) -> int:
    """
    Agrega una comisión en cero al doctor en cada línea de su especialidad.
    Retorna cuántas líneas se modificaron.
    """
    added = 0
    for service in quotation.services:
        if not earns_commission_on(doctor, service.specialty_id):
            continue
        if any(c.doctor_id == doctor.id for c in service.commissions):
            continue
        service.commissions.append(_empty_allocation(doctor.id))
        added += 1
    return added


def unassign_doctor(quotation: Quotation, doctor_id: str) -> None:
    for service in quotation.services:
        service.commissions = [
            c for c in service.commissions if c.doctor_id != doctor_id
        ]


def drop_specialty(quotation: Quotation, specialty_id: str) -> None:
    """Quita las líneas de una especialidad deseleccionada."""
    quotation.services = [
        s for s in quotation.services if s.specialty_id != specialty_id
    ]


def service_commission_percentage(service: ServiceLine) -> int:
    """Porción del subtotal de la línea que se va en comisiones."""
    subtotal = compute_service_subtotal(service)
    if subtotal == 0:
        return 0
    commissions = sum(c.amount for c in service.commissions)
    return round_amount(100 * to_decimal(commissions) / subtotal)


def service_net(service: ServiceLine) -> int:
    return compute_service_subtotal(service) - sum(c.amount for c in service.commissions)


# ── Validación del borrador ──────────────


def validate_quotation_draft(quotation: Quotation) -> LedgerOutcome:
    """Reglas que el formulario exige antes de enviar la cotización."""
    if (
        not quotation.client_name.strip()
        or not quotation.phone.strip()
        or not quotation.services
    ):
        return reject(
            LedgerErrorCode.INCOMPLETE_QUOTATION,
            "Por favor complete todos los campos requeridos",
        )

    if any(s.quantity < 1 for s in quotation.services):
        return reject(
            LedgerErrorCode.INVALID_QUANTITY,
            "Por favor ingrese una cantidad válida para todos los servicios (mínimo 1)",
        )

    for service in quotation.services:
        subtotal = compute_service_subtotal(service)
        if subtotal == 0:
            continue
        if sum(c.amount for c in service.commissions) > subtotal:
            return reject(
                LedgerErrorCode.COMMISSION_EXCEEDS_SERVICE_SUBTOTAL,
                "Las comisiones no pueden superar el total del servicio",
            )

    return accept(quotation)


# ── Reparto efectivo / QR ────────────────


def default_payment_split(amount: int, method: PaymentMethod) -> tuple[int, int]:
    """(efectivo, qr) iniciales al elegir un método de pago."""
    if method == PaymentMethod.CASH:
        return amount, 0
    if method == PaymentMethod.QR:
        return 0, amount
    return math.floor(amount / 2), math.ceil(amount / 2)


def rebalance_mixed_payment(
    amount: int,
    cash_amount: float | None = None,
    qr_amount: float | None = None,
) -> tuple[float, float]:
    """En pago mixto, al editar un lado el otro completa el monto."""
    if cash_amount is not None:
        return cash_amount, amount - cash_amount
    if qr_amount is not None:
        return amount - qr_amount, qr_amount
    return default_payment_split(amount, PaymentMethod.MIXED)
