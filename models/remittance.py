from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    TIMESTAMP,
    JSON,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from database.db import time_now
from context_manager.context import get_db_session


JSONType = JSON().with_variant(JSONB, "postgresql")

REMITTANCE_STATES = ["upcoming", "processing", "settled"]

# states written by older releases
LEGACY_STATE_MAPPING = {"pending": "upcoming", "completed": "settled"}


class Remittance(DBBase, DBBaseClass):
    __tablename__ = "remittance"

    remittance_number = Column(String(100), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id"), nullable=False, index=True)

    date = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    remittance_date = Column(TIMESTAMP(timezone=True), nullable=False)
    bank_transaction_id = Column(String(255), nullable=True)

    state = Column(String(20), nullable=False, default="upcoming", index=True)
    total_remittance = Column(Numeric(12, 2), nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)
    processed_on = Column(TIMESTAMP(timezone=True), nullable=True)

    settlement_date = Column(TIMESTAMP(timezone=True), nullable=True)
    settled_by = Column(String(255), nullable=True)

    # {"bank", "beneficiary_name", "account_number", "ifsc_code"}
    account_details = Column(JSONType, nullable=True)

    uploaded_by = Column(String(255), nullable=False, default="admin")
    upload_batch_id = Column(String(100), nullable=True)

    client = relationship("Client", lazy="joined")
    remittance_orders = relationship(
        "Remittance_Order",
        back_populates="remittance",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Remittance_Order.id",
    )

    __table_args__ = (
        Index("ix_remittance_number_client", "remittance_number", "client_id"),
        Index("ix_remittance_client_state", "client_id", "state"),
    )

    def recalculate_totals(self):
        self.total_orders = len(self.remittance_orders)
        self.total_remittance = sum(
            (Decimal(str(line.amount_collected)) for line in self.remittance_orders),
            Decimal("0"),
        )

    def add_order(self, awb_number, amount_collected, order_id=None, order_ref=None, delivered_date=None):
        if any(line.awb_number == awb_number for line in self.remittance_orders):
            return False

        self.remittance_orders.append(
            Remittance_Order(
                awb_number=awb_number,
                amount_collected=amount_collected,
                order_id=order_id,
                order_ref=order_ref,
                delivered_date=delivered_date,
            )
        )
        self.recalculate_totals()
        return True

    def remove_order(self, awb_number):
        before = len(self.remittance_orders)
        self.remittance_orders = [
            line for line in self.remittance_orders if line.awb_number != awb_number
        ]
        self.recalculate_totals()
        return len(self.remittance_orders) != before

    def mark_processing(self):
        self.state = "processing"

    def mark_settled(self, bank_transaction_id=None, settled_by="admin"):
        now = time_now()
        self.state = "settled"
        self.bank_transaction_id = bank_transaction_id or self.bank_transaction_id
        self.settlement_date = now
        self.settled_by = settled_by
        if not self.processed_on:
            self.processed_on = now

    @classmethod
    def get_by_remittance_number(cls, remittance_number: str, client_id: int = None, db=None):
        db = db or get_db_session()
        query = db.query(cls).filter(
            cls.remittance_number == remittance_number, cls.is_deleted.is_(False)
        )
        if client_id is not None:
            query = query.filter(cls.client_id == client_id)
        return query.first()


class Remittance_Order(DBBase, DBBaseClass):
    __tablename__ = "remittance_order"

    remittance_id = Column(Integer, ForeignKey("remittance.id"), nullable=False, index=True)

    awb_number = Column(String(100), nullable=False, index=True)
    amount_collected = Column(Numeric(10, 2), nullable=False)
    order_id = Column(String(255), nullable=True)
    order_ref = Column(Integer, ForeignKey("order.id"), nullable=True)
    delivered_date = Column(TIMESTAMP(timezone=True), nullable=True)

    remittance = relationship("Remittance", back_populates="remittance_orders")
