import base64


WEBHOOK_HEADERS = {"X-Webhook-Token": "test-webhook-token"}

STANDARD_ZONES = ["A", "B", "C", "D", "E", "F"]
REGIONAL_ZONES = ["City", "Regional", "Metro", "RestOfIndia", "SpecialZone"]

# zone D prices per option1 slab, other standard zones are offsets of these
OPTION1_SLABS = [
    ("0-250 gm", 45),
    ("250-500 gm", 16),
    ("Add. 500 gm till 5 kg", 35),
    ("Upto 5 kgs", 300),
    ("Add. 1 kgs till 10 kg", 40),
    ("Upto 10 kgs", 480),
    ("Add. 1 kgs", 38),
]

OPTION2_SLABS = [
    ("0-5 kg", 250),
    ("Add. 1 kg till 9 kg", 40),
    ("10 kg", 420),
    ("Add. 1 kg till 19 kg", 35),
    ("20 kg", 700),
    ("Add. 1 kg above 20 kg", 30),
]

ZONE_OFFSETS = {"A": -15, "B": -10, "C": -5, "D": 0, "E": 10, "F": 20}

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
JPEG_BASE64 = base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg").decode()


def build_slabs(slabs=OPTION1_SLABS, zones=STANDARD_ZONES, discount=0):
    return [
        {
            "condition": condition,
            "zones": {
                zone: price + ZONE_OFFSETS.get(zone, 0) - discount for zone in zones
            },
        }
        for condition, price in slabs
    ]


def rate_card_payload(user_category="New User", slabs=OPTION1_SLABS, zones=STANDARD_ZONES):
    return {
        "user_category": user_category,
        "forward_charges": build_slabs(slabs, zones),
        "rto_charges": build_slabs(slabs, zones, discount=5),
        "cod_charges": {"percentage": 2, "minimum_amount": 40, "gst_additional": True},
        "zone_definitions": [{"zone": "A", "definition": "Within city"}],
        "terms_and_conditions": ["Freight is inclusive of GST"],
    }


def scan_push(
    awb,
    status="In Transit",
    status_type="UD",
    status_date_time="2026-03-10T10:15:00",
    reference_no=None,
    nsl_code=None,
    instructions=None,
    location="Mumbai_Hub (Maharashtra)",
):
    shipment = {
        "AWB": awb,
        "Status": {
            "Status": status,
            "StatusType": status_type,
            "StatusDateTime": status_date_time,
            "StatusLocation": location,
            "Instructions": instructions,
        },
    }
    if reference_no:
        shipment["ReferenceNo"] = reference_no
    if nsl_code:
        shipment["NSLCode"] = nsl_code

    return {"Shipment": shipment}
