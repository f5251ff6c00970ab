"""
Freight calculation against a carrier rate card.

A rate card holds weight slabs, each carrying one price per zone:

    {"condition": "0-250 gm", "zones": {"A": 45, "B": 52, ...}}

Slab conditions are free text typed by the ops team, so they are
classified into fixed slab keys before any arithmetic happens. Two slab
layouts exist, matching Carrier.weight_slab_type:

option1 (granular)
    0-250 gm, 250-500 gm, Add. 500 gm till 5 kg, Upto 5 kgs,
    Add. 1 kgs till 10 kg, Upto 10 kgs, Add. 1 kgs

option2 (heavy)
    0-5 kg, Add. 1 kg till 9 kg, 10 kg, Add. 1 kg till 19 kg,
    20 kg, Add. 1 kg above 20 kg

Within each band the incremental price is capped by the flat price of
the next band, so the charge never decreases as weight grows.
"""

import math
import re
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional


GST_RATE = Decimal("0.18")
TWO_PLACES = Decimal("0.01")

SHIPMENT_FORWARD = "forward"
SHIPMENT_RTO = "rto"

ZONE_TO_REGIONAL = {
    "A": "City",
    "B": "Regional",
    "C": "Metro",
    "D": "RestOfIndia",
    "E": "SpecialZone",
    "F": "SpecialZone",
}


class RateCardError(ValueError):
    pass


@dataclass
class ChargeBreakdown:
    zone: str
    chargeable_weight: Decimal
    freight: Decimal
    cod_charges: Decimal
    gst_amount: Decimal
    total: Decimal

    def to_dict(self):
        return {key: (float(value) if isinstance(value, Decimal) else value) for key, value in asdict(self).items()}


# order matters, the more specific patterns must win
OPTION1_PATTERNS = [
    ("first_250g", re.compile(r"^0-250gm?$")),
    ("next_250g", re.compile(r"^250-500gm?$")),
    ("add_500g_till_5kg", re.compile(r"^add\.?500gm?till5kgs?$")),
    ("add_1kg_till_10kg", re.compile(r"^add\.?1kgs?till10(k|kg|kgs)?$")),
    ("upto_5kg", re.compile(r"^upto5kgs?$")),
    ("upto_10kg", re.compile(r"^upto10kgs?$")),
    ("add_1kg", re.compile(r"^add\.?1kgs?$")),
]

OPTION2_PATTERNS = [
    ("upto_5kg", re.compile(r"^0-5kgs?$")),
    ("add_1kg_till_9kg", re.compile(r"^add\.?1kgs?till9kgs?$")),
    ("add_1kg_till_19kg", re.compile(r"^add\.?1kgs?till19kgs?$")),
    ("add_1kg_above_20kg", re.compile(r"^add\.?1kgs?above20kgs?$")),
    ("flat_10kg", re.compile(r"^10kgs?$")),
    ("flat_20kg", re.compile(r"^20kgs?$")),
]

REQUIRED_KEYS = {
    "option1": [key for key, _ in OPTION1_PATTERNS],
    "option2": [key for key, _ in OPTION2_PATTERNS],
}


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _normalize_condition(condition: str) -> str:
    text = condition.strip().lower()
    if text.startswith("dto "):
        text = text[4:]
    return re.sub(r"\s+", "", text)


def classify_slab(condition: str, slab_type: str = "option1") -> str:
    if not condition:
        raise RateCardError("Weight slab condition is empty")

    patterns = OPTION2_PATTERNS if slab_type == "option2" else OPTION1_PATTERNS
    normalized = _normalize_condition(condition)

    for key, pattern in patterns:
        if pattern.match(normalized):
            return key

    raise RateCardError(f"Unrecognised weight slab condition: {condition!r}")


def resolve_zone_label(zone: str, zone_type: str = "standard") -> str:
    zone = (zone or "D").strip()
    if zone_type == "regional":
        return ZONE_TO_REGIONAL.get(zone.upper(), zone)
    return zone.upper()


def slab_prices(slabs: List[dict], zone_label: str, slab_type: str = "option1") -> Dict[str, Decimal]:
    """Map slab key -> price for one zone."""
    if not slabs:
        raise RateCardError("Rate card has no weight slabs")

    prices = {}
    for slab in slabs:
        key = classify_slab(slab.get("condition"), slab_type)
        zones = slab.get("zones") or {}
        if zone_label not in zones or zones[zone_label] is None:
            raise RateCardError(
                f"Zone {zone_label} missing in slab {slab.get('condition')!r}"
            )
        prices[key] = Decimal(str(zones[zone_label]))

    missing = [key for key in REQUIRED_KEYS[slab_type] if key not in prices]
    if missing:
        raise RateCardError(f"Rate card is missing slabs: {', '.join(missing)}")

    return prices


def _increments(weight: Decimal, floor: Decimal, step: Decimal) -> int:
    return math.ceil((weight - floor) / step)


def freight_for_weight(prices: Dict[str, Decimal], weight: Decimal, slab_type: str = "option1") -> Decimal:
    if weight <= 0:
        raise RateCardError("Chargeable weight must be greater than zero")

    if slab_type == "option2":
        if weight <= 5:
            return prices["upto_5kg"]
        if weight <= 10:
            return min(
                prices["upto_5kg"]
                + _increments(weight, Decimal("5"), Decimal("1")) * prices["add_1kg_till_9kg"],
                prices["flat_10kg"],
            )
        if weight <= 20:
            return min(
                prices["flat_10kg"]
                + _increments(weight, Decimal("10"), Decimal("1")) * prices["add_1kg_till_19kg"],
                prices["flat_20kg"],
            )
        return (
            prices["flat_20kg"]
            + _increments(weight, Decimal("20"), Decimal("1")) * prices["add_1kg_above_20kg"]
        )

    first_500g = prices["first_250g"] + prices["next_250g"]

    if weight <= Decimal("0.25"):
        return prices["first_250g"]
    if weight <= Decimal("0.5"):
        return first_500g
    if weight <= 5:
        return min(
            first_500g
            + _increments(weight, Decimal("0.5"), Decimal("0.5")) * prices["add_500g_till_5kg"],
            prices["upto_5kg"],
        )
    if weight <= 10:
        return min(
            prices["upto_5kg"]
            + _increments(weight, Decimal("5"), Decimal("1")) * prices["add_1kg_till_10kg"],
            prices["upto_10kg"],
        )
    return prices["upto_10kg"] + _increments(weight, Decimal("10"), Decimal("1")) * prices["add_1kg"]


def cod_charge(cod_config: dict, cod_amount) -> Decimal:
    """Higher of the flat minimum and the percentage of the collectable amount."""
    percentage = Decimal(str(cod_config.get("percentage", 0)))
    minimum_amount = Decimal(str(cod_config.get("minimum_amount", 0)))
    amount = Decimal(str(cod_amount or 0))

    return max(minimum_amount, percentage * amount / Decimal("100"))


def _carrier_layout(carrier):
    if carrier is None:
        return "standard", "option1"
    if isinstance(carrier, dict):
        return carrier.get("zone_type") or "standard", carrier.get("weight_slab_type") or "option1"
    return carrier.zone_type or "standard", carrier.weight_slab_type or "option1"


def calculate_charges(
    rate_card,
    carrier,
    zone: str,
    weight_kg,
    payment_mode: str = "prepaid",
    cod_amount=0,
    shipment_type: str = SHIPMENT_FORWARD,
) -> ChargeBreakdown:
    """
    Price one shipment.

    rate_card may be a Rate_Card row or a plain dict with the same keys,
    carrier likewise (None means standard zones with option1 slabs).
    Freight slabs are GST inclusive; GST is only added on the COD charge
    when the card says so. RTO never carries a COD charge.
    """
    zone_type, slab_type = _carrier_layout(carrier)

    if isinstance(rate_card, dict):
        forward_charges = rate_card.get("forward_charges")
        rto_charges = rate_card.get("rto_charges")
        cod_config = rate_card.get("cod_charges") or {}
    else:
        forward_charges = rate_card.forward_charges
        rto_charges = rate_card.rto_charges
        cod_config = rate_card.cod_charges or {}

    weight = Decimal(str(weight_kg))
    zone_label = resolve_zone_label(zone, zone_type)

    slabs = rto_charges if shipment_type == SHIPMENT_RTO else forward_charges
    prices = slab_prices(slabs, zone_label, slab_type)
    freight = freight_for_weight(prices, weight, slab_type)

    cod = Decimal("0")
    if shipment_type != SHIPMENT_RTO and (payment_mode or "").lower() == "cod":
        cod = cod_charge(cod_config, cod_amount)

    gst = cod * GST_RATE if cod_config.get("gst_additional", True) else Decimal("0")

    freight, cod, gst = _money(freight), _money(cod), _money(gst)

    return ChargeBreakdown(
        zone=zone_label,
        chargeable_weight=weight,
        freight=freight,
        cod_charges=cod,
        gst_amount=gst,
        total=freight + cod + gst,
    )


def validate_rate_card_payload(data: dict, zone_labels: Optional[List[str]] = None, slab_type: str = "option1"):
    """Raise RateCardError describing the first problem found."""
    for field in ("forward_charges", "rto_charges"):
        slabs = data.get(field)
        if slabs is None:
            continue
        if not isinstance(slabs, list) or not slabs:
            raise RateCardError(f"{field} must be a non-empty list")

        for slab in slabs:
            if not isinstance(slab, dict) or not slab.get("condition") or not isinstance(slab.get("zones"), dict):
                raise RateCardError(f"Each {field} slab must have condition and zones")

            classify_slab(slab["condition"], slab_type)

            for zone, value in slab["zones"].items():
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise RateCardError(f"Zone {zone} must be a number in {field}")
                if zone_labels is not None and zone not in zone_labels:
                    raise RateCardError(f"Unknown zone {zone} in {field}")

            if zone_labels is not None:
                missing = [zone for zone in zone_labels if zone not in slab["zones"]]
                if missing:
                    raise RateCardError(
                        f"Slab {slab['condition']!r} in {field} is missing zones: {', '.join(missing)}"
                    )

    cod_config = data.get("cod_charges")
    if cod_config is not None:
        for field in ("percentage", "minimum_amount"):
            value = cod_config.get(field)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise RateCardError(f"COD {field} must be a non-negative number")
