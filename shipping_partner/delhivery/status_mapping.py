from logger import logger


# internal order states
PICKUPS_MANIFESTS = "pickups_manifests"
READY_TO_SHIP = "ready_to_ship"
IN_TRANSIT = "in_transit"
OUT_FOR_DELIVERY = "out_for_delivery"
DELIVERED = "delivered"
NDR = "ndr"
RTO_IN_TRANSIT = "rto_in_transit"
RTO_DELIVERED = "rto_delivered"
CANCELLED = "cancelled"
LOST = "lost"

TERMINAL_STATUSES = {DELIVERED, RTO_DELIVERED, CANCELLED}


# Delhivery StatusCodes that mean a failed delivery attempt (NDR API whitelist)
NDR_STATUS_CODES = {
    "EOD-3",  # delivery rescheduled by customer
    "EOD-6",  # consignee unavailable
    "EOD-11",  # address incomplete / incorrect
    "EOD-15",  # customer not available
    "EOD-16",  # refused, COD not ready
    "EOD-43",  # cash not ready
    "EOD-69",  # customer wants open delivery
    "EOD-74",  # consignee refused
    "EOD-86",  # door locked / premises closed
    "EOD-104",  # customer wants to reschedule
    "ST-108",  # shipment seized by customer
}


# StatusType -> {lowercased Status: state}, plus the fallback for that type.
# PP / PU are reverse pickups, so "Dispatched" there means the field
# executive is on the way, not a forward out-for-delivery.
status_type_mapping = {
    "PP": {
        "statuses": {
            "open": PICKUPS_MANIFESTS,
            "scheduled": PICKUPS_MANIFESTS,
            "dispatched": OUT_FOR_DELIVERY,
        },
        "fallback": PICKUPS_MANIFESTS,
    },
    "PU": {
        "statuses": {
            "in transit": IN_TRANSIT,
            "pending": IN_TRANSIT,
            "dispatched": OUT_FOR_DELIVERY,
        },
        "fallback": IN_TRANSIT,
    },
    "RT": {"statuses": {}, "fallback": RTO_IN_TRANSIT},
    "CN": {"statuses": {}, "fallback": CANCELLED},
    "DL": {
        "statuses": {
            "delivered": DELIVERED,
            "rto": RTO_DELIVERED,
            "dto": DELIVERED,
        },
        "fallback": DELIVERED,
    },
}

status_mapping = {
    # forward updates
    "manifested": PICKUPS_MANIFESTS,
    "not picked": PICKUPS_MANIFESTS,
    "pickup exception": PICKUPS_MANIFESTS,
    "open": PICKUPS_MANIFESTS,
    "scheduled": PICKUPS_MANIFESTS,
    "in transit": IN_TRANSIT,
    "pending": IN_TRANSIT,
    "reached at destination": IN_TRANSIT,
    "reached destination city": IN_TRANSIT,
    "dispatched": OUT_FOR_DELIVERY,
    "out for delivery": OUT_FOR_DELIVERY,
    # delivered
    "delivered": DELIVERED,
    "dto": DELIVERED,
    # return
    "rto": RTO_IN_TRANSIT,
    "rto initiated": RTO_IN_TRANSIT,
    "rto delivered": RTO_DELIVERED,
    # failed attempts
    "undelivered": NDR,
    "customer not available": NDR,
    "customer refused": NDR,
    "incomplete address": NDR,
    "cash not ready": NDR,
    "consignee not available": NDR,
    "delivery attempted": NDR,
    # cancelled
    "canceled": CANCELLED,
    "cancelled": CANCELLED,
    "closed": CANCELLED,
    # other
    "lost": LOST,
    "damaged": LOST,
}

status_type_fallback = {"UD": IN_TRANSIT}


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES


def is_ndr_code(status_code) -> bool:
    if not status_code:
        return False
    return str(status_code).strip().upper() in NDR_STATUS_CODES


def map_delhivery_status(status, status_type=None, status_code=None, strict=False):
    """
    Map a Delhivery Status / StatusType / StatusCode triple to an order state.

    StatusType is checked first because "Dispatched", "Pending" and
    "In Transit" mean different things on forward and reverse legs.
    Unknown input returns None when strict, otherwise in_transit.
    """
    normalized_status = str(status or "").strip().lower()
    normalized_type = str(status_type or "").strip().upper() or None
    normalized_code = str(status_code or "").strip().upper() or None

    if normalized_type in status_type_mapping:
        type_rules = status_type_mapping[normalized_type]

        if normalized_status in type_rules["statuses"]:
            return type_rules["statuses"][normalized_status]

        if normalized_type == "DL" and "rto" in normalized_status:
            return RTO_DELIVERED

        return type_rules["fallback"]

    if normalized_code and normalized_code in NDR_STATUS_CODES:
        return NDR

    if normalized_status in status_mapping:
        return status_mapping[normalized_status]

    if normalized_type in status_type_fallback:
        return status_type_fallback[normalized_type]

    if strict:
        return None

    logger.warning(
        msg="Unknown Delhivery status %r (type=%s, code=%s), defaulting to in_transit"
        % (status, normalized_type, normalized_code)
    )
    return IN_TRANSIT
