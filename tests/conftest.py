import os

# must be set before anything imports the database or celery modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["DELHIVERY_WEBHOOK_TOKEN"] = "test-webhook-token"
os.environ["JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ["S3_BUCKET_NAME"] = "test-bucket"
os.environ["REGION_NAME"] = "ap-south-1"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database.db import DBBase, SessionLocal, init_models
from context_manager.context import context_db_session, context_user_data
from utils.jwt_token_handler import JWTHandler
from models import Carrier, Client, Order, Pincode_Mapping, Rate_Card
from tests.helpers import OPTION1_SLABS, OPTION2_SLABS, rate_card_payload


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    init_models()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    session_token = context_db_session.set(session)
    user_token = context_user_data.set("")

    yield session

    session.rollback()
    for table in reversed(DBBase.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()

    context_user_data.reset(user_token)
    context_db_session.reset(session_token)


@pytest.fixture
def client_factory(db):
    def create(client_code="SS001", user_category="New User"):
        client = Client(
            client_code=client_code,
            company_name=f"{client_code} Traders",
            email=f"{client_code.lower()}@example.com",
            user_category=user_category,
        )
        db.add(client)
        db.commit()
        return client

    return create


@pytest.fixture
def carrier_factory(db):
    def create(
        carrier_code="DELHIVERY_SURFACE",
        carrier_group="DELHIVERY",
        service_type="surface",
        zone_type="standard",
        weight_slab_type="option1",
        priority_order=0,
        is_active=True,
    ):
        carrier = Carrier(
            carrier_code=carrier_code,
            display_name=carrier_code.replace("_", " ").title(),
            carrier_group=carrier_group,
            service_type=service_type,
            zone_type=zone_type,
            weight_slab_type=weight_slab_type,
            priority_order=priority_order,
            is_active=is_active,
        )
        db.add(carrier)
        db.commit()
        return carrier

    return create


@pytest.fixture
def rate_card_factory(db):
    def create(carrier, user_category="New User", version=1, is_current=True, **overrides):
        slabs = OPTION2_SLABS if carrier.weight_slab_type == "option2" else OPTION1_SLABS
        payload = rate_card_payload(user_category, slabs, carrier.zone_labels)
        payload.pop("user_category")
        payload.update(overrides)

        rate_card = Rate_Card(
            carrier_id=carrier.id,
            user_category=user_category,
            version=version,
            is_current=is_current,
            **payload,
        )
        db.add(rate_card)
        db.commit()
        return rate_card

    return create


@pytest.fixture
def order_factory(db):
    counter = {"value": 0}

    def create(client, **fields):
        counter["value"] += 1
        number = counter["value"]

        values = {
            "order_id": f"ORD-{number:04d}",
            "client_id": client.id,
            "awb_number": f"1490{number:08d}",
            "courier_partner": "delhivery",
            "payment_mode": "prepaid",
            "order_value": Decimal("1000"),
            "cod_amount": Decimal("0"),
            "weight": Decimal("0.5"),
            "pickup_pincode": "110001",
            "delivery_pincode": "400001",
            "status": "in_transit",
            "status_history": [],
        }
        values.update(fields)

        order = Order(**values)
        db.add(order)
        db.commit()
        return order

    return create


@pytest.fixture
def pincode_factory(db):
    def create(pincode, city, state):
        record = Pincode_Mapping.create(pincode, city, state)
        db.add(record)
        db.commit()
        return record

    return create


@pytest.fixture
def token_factory():
    def create(user_id=1, client_id=None, role="client", permissions=None, status="active"):
        return JWTHandler.create_access_token(
            {
                "id": user_id,
                "client_id": client_id,
                "email": f"user{user_id}@example.com",
                "role": role,
                "permissions": permissions or {},
                "status": status,
            }
        )

    return create


@pytest.fixture
def auth_headers(token_factory):
    def create(**kwargs):
        return {"Authorization": "Bearer " + token_factory(**kwargs)}

    return create


@pytest.fixture
def api(db):
    from main import app

    return TestClient(app)
