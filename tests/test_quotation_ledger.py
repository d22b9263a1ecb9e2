"""Tests del ledger: totales, comisiones por doctor y registro de pagos."""

from datetime import datetime, timezone

from cotizaciones.schemas.ledger import LedgerErrorCode
from cotizaciones.schemas.quotation import (
    PaymentCandidate,
    PaymentMethod,
    PaymentRecord,
    Quotation,
    QuotationStatus,
)
from cotizaciones.services.quotation_ledger import (
    compute_doctor_commission_percentage_of_total,
    compute_doctor_commission_totals,
    compute_paid_amount,
    compute_paid_commissions_per_doctor,
    compute_pending_amount,
    compute_pending_commissions_per_doctor,
    compute_service_subtotal,
    compute_status,
    compute_total,
    compute_total_commissions,
    compute_total_net,
    suggest_payment_split,
    summarize_quotation,
    validate_and_append_payment,
)


def _pay(quotation, amount, method=PaymentMethod.CASH, cash=None, qr=0, commissions=None):
    candidate = PaymentCandidate(
        amount=amount,
        payment_method=method,
        cash_amount=amount if cash is None else cash,
        qr_amount=qr,
        doctor_commissions=commissions or {},
    )
    return validate_and_append_payment(quotation, candidate)


# ── Totales ──────────────────────────────


def test_totals(quotation):
    assert [compute_service_subtotal(s) for s in quotation.services] == [200, 300]
    assert compute_total(quotation) == 500
    assert compute_total_commissions(quotation) == 100
    assert compute_total_net(quotation) == 400


def test_free_service_has_zero_subtotal(quotation):
    service = quotation.services[0]
    service.unit_price = 0
    assert compute_service_subtotal(service) == 0


def test_doctor_commission_totals(quotation):
    totals = compute_doctor_commission_totals(quotation)
    assert totals == {"doc-1": 70, "doc-2": 30}
    assert sum(totals.values()) == compute_total_commissions(quotation)


def test_doctor_percentage_of_total(quotation):
    assert compute_doctor_commission_percentage_of_total(quotation, "doc-1") == 14.0
    assert compute_doctor_commission_percentage_of_total(quotation, "doc-2") == 6.0
    assert compute_doctor_commission_percentage_of_total(quotation, "doc-x") == 0.0


def test_percentage_of_total_is_zero_without_total():
    quotation = Quotation(date="2025-01-01")
    assert compute_doctor_commission_percentage_of_total(quotation, "doc-1") == 0.0


def test_pending_commissions_skip_doctors_without_earnings(quotation_payload):
    quotation_payload["services"][0]["commissions"].append(
        {"doctorId": "doc-3", "mode": "percentage", "percentage": 0, "amount": 0}
    )
    quotation = Quotation.model_validate(quotation_payload)

    assert compute_doctor_commission_totals(quotation)["doc-3"] == 0
    assert "doc-3" not in compute_pending_commissions_per_doctor(quotation)


def test_computations_are_idempotent(quotation):
    _pay(quotation, 100, commissions={"doc-1": 10})
    assert compute_pending_amount(quotation) == compute_pending_amount(quotation)
    assert compute_doctor_commission_totals(quotation) == compute_doctor_commission_totals(quotation)


# ── Estado y saldos ──────────────────────


def test_new_quotation_is_pending(quotation):
    assert compute_paid_amount(quotation) == 0
    assert compute_pending_amount(quotation) == 500
    assert compute_status(quotation) == QuotationStatus.PENDING


def test_full_cash_payment_completes_quotation(quotation):
    outcome = _pay(quotation, 500)

    assert outcome.ok
    assert outcome.value.status == QuotationStatus.COMPLETED
    assert outcome.value.pending_amount == 0
    assert compute_pending_amount(quotation) == 0
    assert compute_status(quotation) == QuotationStatus.COMPLETED


def test_paid_plus_pending_equals_total(quotation):
    for amount in (120, 80, 50):
        assert _pay(quotation, amount).ok
        assert compute_paid_amount(quotation) + compute_pending_amount(quotation) == 500
    assert compute_status(quotation) == QuotationStatus.PENDING


def test_pending_never_negative(quotation):
    quotation.services[1].unit_price = 0
    quotation.services[1].commissions = []
    quotation.payments.append(_record(amount=400))
    assert compute_pending_amount(quotation) == 0


def _record(amount):
    return PaymentRecord(
        id="p-old",
        date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        amount=amount,
        cash_amount=amount,
    )


def test_paid_and_pending_commissions_per_doctor(quotation):
    assert _pay(quotation, 250, commissions={"doc-1": 35, "doc-2": 15}).ok
    assert _pay(quotation, 50, commissions={"doc-1": 5}).ok

    assert compute_paid_commissions_per_doctor(quotation) == {"doc-1": 40, "doc-2": 15}
    assert compute_pending_commissions_per_doctor(quotation) == {"doc-1": 30, "doc-2": 15}


# ── Sugerencia de reparto ────────────────


def test_suggest_split_is_proportional(quotation):
    assert suggest_payment_split(quotation, 250) == {"doc-1": 35, "doc-2": 15}


def test_suggest_split_never_exceeds_pending(quotation):
    assert _pay(quotation, 250, commissions={"doc-1": 35, "doc-2": 30}).ok

    suggestion = suggest_payment_split(quotation, 250)
    assert suggestion == {"doc-1": 35}


def test_suggest_split_caps_at_pending_commission(quotation):
    assert _pay(quotation, 100, commissions={"doc-1": 60}).ok
    assert suggest_payment_split(quotation, 400)["doc-1"] == 10


# ── Validación de pagos ──────────────────


def test_register_payment_assigns_id_and_date(quotation):
    paid_at = datetime(2025, 3, 5, 15, 30, tzinfo=timezone.utc)
    candidate = PaymentCandidate(amount=100, cash_amount=100)

    outcome = validate_and_append_payment(
        quotation, candidate, payment_id="p-77", paid_at=paid_at
    )

    assert outcome.ok
    assert outcome.value.payment.id == "p-77"
    assert quotation.payments[-1].date == paid_at
    assert quotation.payments[-1].amount == 100


def test_register_payment_generates_id_when_missing(quotation):
    outcome = _pay(quotation, 100)
    assert outcome.ok
    assert outcome.value.payment.id
    assert outcome.value.payment.date.tzinfo is not None


def test_zero_amount_is_rejected(quotation):
    outcome = _pay(quotation, 0)
    assert outcome.error.code == LedgerErrorCode.INVALID_AMOUNT
    assert quotation.payments == []


def test_negative_amount_is_rejected(quotation):
    outcome = _pay(quotation, -10, cash=0)
    assert outcome.error.code == LedgerErrorCode.INVALID_AMOUNT


def test_amount_above_pending_is_rejected(quotation):
    assert _pay(quotation, 300).ok
    outcome = _pay(quotation, 201)

    assert outcome.error.code == LedgerErrorCode.EXCEEDS_PENDING_TOTAL
    assert len(quotation.payments) == 1


def test_mixed_payment_must_reconcile(quotation):
    outcome = _pay(quotation, 100, method=PaymentMethod.MIXED, cash=40, qr=50)

    assert outcome.error.code == LedgerErrorCode.MIXED_AMOUNT_MISMATCH
    assert quotation.payments == []


def test_mixed_payment_accepts_display_rounding(quotation):
    outcome = _pay(quotation, 100, method=PaymentMethod.MIXED, cash=40.004, qr=60)
    assert outcome.ok


def test_cash_payment_is_recorded_in_cash(quotation):
    candidate = PaymentCandidate(
        amount=500, payment_method=PaymentMethod.CASH, cash_amount=0, qr_amount=500
    )

    assert validate_and_append_payment(quotation, candidate).ok
    record = quotation.payments[-1]
    assert (record.cash_amount, record.qr_amount) == (500, 0)


def test_qr_payment_is_recorded_in_qr(quotation):
    outcome = _pay(quotation, 80, method=PaymentMethod.QR, cash=80)

    assert outcome.ok
    assert (outcome.value.payment.cash_amount, outcome.value.payment.qr_amount) == (0, 80)


def test_mixed_payment_keeps_entered_channels(quotation):
    outcome = _pay(quotation, 80, method=PaymentMethod.MIXED, cash=30, qr=50)

    assert outcome.ok
    assert (outcome.value.payment.cash_amount, outcome.value.payment.qr_amount) == (30, 50)


def test_mixed_mismatch_checked_before_commissions(quotation):
    outcome = _pay(
        quotation, 50, method=PaymentMethod.MIXED, cash=10, qr=10,
        commissions={"doc-1": 60},
    )
    assert outcome.error.code == LedgerErrorCode.MIXED_AMOUNT_MISMATCH


def test_commissions_cannot_exceed_payment(quotation):
    outcome = _pay(quotation, 50, commissions={"doc-1": 40, "doc-2": 20})
    assert outcome.error.code == LedgerErrorCode.COMMISSION_EXCEEDS_PAYMENT


def test_commission_cannot_exceed_doctor_pending(quotation):
    outcome = _pay(quotation, 100, commissions={"doc-2": 35})

    assert outcome.error.code == LedgerErrorCode.COMMISSION_EXCEEDS_DOCTOR_PENDING
    assert outcome.error.doctor_id == "doc-2"
    assert quotation.payments == []


def test_commission_for_doctor_without_allocation_is_rejected(quotation):
    outcome = _pay(quotation, 100, commissions={"doc-9": 1})

    assert outcome.error.code == LedgerErrorCode.COMMISSION_EXCEEDS_DOCTOR_PENDING
    assert outcome.error.doctor_id == "doc-9"


def test_zero_commission_entries_are_allowed(quotation):
    outcome = _pay(quotation, 100, commissions={"doc-1": 0, "doc-9": 0})
    assert outcome.ok


# ── Resumen ──────────────────────────────


def test_summary(quotation):
    assert _pay(quotation, 250, commissions={"doc-1": 35, "doc-2": 15}).ok
    summary = summarize_quotation(quotation)

    assert summary.total == 500
    assert summary.total_commissions == 100
    assert summary.total_net == 400
    assert summary.paid_amount == 250
    assert summary.pending_amount == 250
    assert summary.status == QuotationStatus.PENDING

    by_doctor = {d.doctor_id: d for d in summary.doctors}
    assert by_doctor["doc-1"].earned == 70
    assert by_doctor["doc-1"].paid == 35
    assert by_doctor["doc-1"].pending == 35
    assert by_doctor["doc-2"].percentage_of_total == 6.0
