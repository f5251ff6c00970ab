"""
Order Model

Only the shipping-side fields are kept here: payment, package, routing,
carrier tracking state, NDR bookkeeping and COD remittance flags.

Field naming conventions:
- Price fields: Numeric(10, 2)
- Weight/dimension fields: Numeric(10, 3)
- All datetime fields: TIMESTAMP with timezone
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    Boolean,
    TIMESTAMP,
    JSON,
    UniqueConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


JSONType = JSON().with_variant(JSONB, "postgresql")


class Order(DBBase, DBBaseClass):

    __tablename__ = "order"

    # ============================================
    # ORDER IDENTIFICATION
    # ============================================

    order_id = Column(String(255), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id"), nullable=False)

    awb_number = Column(String(100), nullable=True, index=True)
    courier_partner = Column(String(100), nullable=True, default="delhivery")

    # ============================================
    # PAYMENT DETAILS
    # ============================================

    payment_mode = Column(String(15), nullable=False)
    order_value = Column(Numeric(10, 2), nullable=False, default=0)
    cod_amount = Column(Numeric(10, 2), nullable=False, default=0)
    cod_remitted = Column(Boolean, nullable=False, default=False)

    # ============================================
    # PACKAGE DETAILS (kg / cm)
    # ============================================

    weight = Column(Numeric(10, 3), nullable=False)
    length = Column(Numeric(10, 3), nullable=True)
    breadth = Column(Numeric(10, 3), nullable=True)
    height = Column(Numeric(10, 3), nullable=True)

    # ============================================
    # ROUTING
    # ============================================

    pickup_pincode = Column(String(10), nullable=True)
    delivery_pincode = Column(String(10), nullable=True)
    zone = Column(String(20), nullable=True)

    # ============================================
    # STATUS
    # ============================================

    status = Column(String(50), nullable=False, default="ready_to_ship", index=True)
    # [{"status", "timestamp", "location", "remarks"}]
    status_history = Column(JSONType, nullable=False, default=list)

    # {"is_ndr", "ndr_attempts", "last_ndr_date", "ndr_reason", "nsl_code",
    #  "next_attempt_date", "resolution_action", "action_history"}
    ndr_info = Column(JSONType, nullable=True)

    # raw carrier state
    courier_status = Column(String(100), nullable=True)
    status_type = Column(String(10), nullable=True)
    last_status_update = Column(TIMESTAMP(timezone=True), nullable=True)

    delivered_date = Column(TIMESTAMP(timezone=True), nullable=True)
    rto_delivered_date = Column(TIMESTAMP(timezone=True), nullable=True)

    cancellation_status = Column(String(50), nullable=True)
    cancellation_date = Column(TIMESTAMP(timezone=True), nullable=True)
    cancellation_message = Column(String(255), nullable=True)

    # ============================================
    # DELIVERY DOCUMENTS
    # ============================================

    epod_url = Column(String(500), nullable=True)
    epod_date = Column(TIMESTAMP(timezone=True), nullable=True)
    weight_photo_url = Column(String(500), nullable=True)

    client = relationship("Client", back_populates="orders", lazy="joined")

    __table_args__ = (
        UniqueConstraint("client_id", "order_id", name="uq_order_client_order_id"),
        Index("ix_order_status_awb", "status", "awb_number"),
    )

    @classmethod
    def find_for_tracking(cls, reference_no: str = None, awb_number: str = None, db=None):
        """Look an order up by its reference first, then by AWB."""
        db = db or get_db_session()
        order = None

        if reference_no:
            order = (
                db.query(cls)
                .filter(cls.order_id == reference_no, cls.is_deleted.is_(False))
                .first()
            )

        if order is None and awb_number:
            order = (
                db.query(cls)
                .filter(cls.awb_number == awb_number, cls.is_deleted.is_(False))
                .first()
            )

        return order
