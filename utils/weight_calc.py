from decimal import Decimal
from typing import Optional


# L x B x H (cm) / 5000 = kg
VOLUMETRIC_DIVISOR = Decimal("5000")


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def volumetric_weight(
    length: Optional[float], breadth: Optional[float], height: Optional[float]
) -> Decimal:
    """Volumetric weight in kg, 0 when any dimension is missing."""
    if not length or not breadth or not height:
        return Decimal("0")

    volume = _to_decimal(length) * _to_decimal(breadth) * _to_decimal(height)
    return (volume / VOLUMETRIC_DIVISOR).quantize(Decimal("0.001"))


def chargeable_weight(
    actual_weight: float,
    length: Optional[float] = None,
    breadth: Optional[float] = None,
    height: Optional[float] = None,
) -> Decimal:
    """Volumetric or dead weight, whichever is higher."""
    return max(_to_decimal(actual_weight), volumetric_weight(length, breadth, height))
