from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Boolean,
    TIMESTAMP,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


JSONType = JSON().with_variant(JSONB, "postgresql")


class Shipment_Tracking_Event(DBBase, DBBaseClass):
    __tablename__ = "shipment_tracking_event"

    waybill = Column(String(100), nullable=False, index=True)
    reference_no = Column(String(255), nullable=True)

    status = Column(String(255), nullable=False)
    status_type = Column(String(10), nullable=True)
    status_date_time = Column(TIMESTAMP(timezone=True), nullable=False)
    status_location = Column(String(255), nullable=True)
    instructions = Column(String(500), nullable=True)

    nsl_code = Column(String(50), nullable=True)
    sort_code = Column(String(100), nullable=True)
    pickup_date = Column(TIMESTAMP(timezone=True), nullable=True)

    raw_payload = Column(JSONType, nullable=True)
    processed = Column(Boolean, nullable=False, default=False)

    order_ref = Column(Integer, ForeignKey("order.id"), nullable=True, index=True)
    order = relationship("Order", lazy="noload")

    # the same scan delivered twice must not be stored twice
    __table_args__ = (
        UniqueConstraint(
            "waybill", "status", "status_date_time", name="uq_tracking_event_scan"
        ),
    )

    @classmethod
    def event_exists(cls, waybill: str, status: str, status_date_time, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(
                cls.waybill == waybill,
                cls.status == status,
                cls.status_date_time == status_date_time,
            )
            .first()
        )

    @classmethod
    def for_waybill(cls, waybill: str, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(cls.waybill == waybill)
            .order_by(cls.status_date_time.desc())
            .all()
        )

    def to_dict(self):
        return {
            "status": self.status,
            "status_type": self.status_type,
            "status_date_time": (
                self.status_date_time.isoformat() if self.status_date_time else None
            ),
            "location": self.status_location,
            "instructions": self.instructions,
            "nsl_code": self.nsl_code,
        }
