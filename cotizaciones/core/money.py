"""
Redondeo monetario a unidades enteras (Bs. sin centavos).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

UNIT = Decimal("1")


def to_decimal(value) -> Decimal:
    """
    Convierte int, float, str o Decimal a Decimal sin arrastrar error binario.
    Lanza ValueError si el valor no es un número finito.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Monto inválido: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Monto inválido: {value!r}")
    return result


def round_amount(value) -> int:
    """Redondea al entero más cercano, mitades hacia arriba (ROUND_HALF_UP)."""
    return int(to_decimal(value).quantize(UNIT, rounding=ROUND_HALF_UP))
