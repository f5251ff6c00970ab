from enum import Enum

from sqlalchemy import Column, String, Integer, ForeignKey, Numeric, TIMESTAMP
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from database.db import time_now


class Dispute_Status(str, Enum):
    new = "NEW"
    dispute = "DISPUTE"
    closed = "CLOSED"


ACTION_DISPUTE_ACCEPTED = "DISPUTE ACCEPTED BY COURIER"
ACTION_DISPUTE_REJECTED = "DISPUTE REJECTED BY COURIER"


class Weight_Discrepancy(DBBase, DBBaseClass):
    __tablename__ = "weight_discrepancy"

    awb_number = Column(String(100), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("order.id"), nullable=True, index=True)

    declared_weight = Column(Numeric(10, 3), nullable=False)
    charged_weight = Column(Numeric(10, 3), nullable=False)
    weight_discrepancy = Column(Numeric(10, 3), nullable=False)
    deduction_amount = Column(Numeric(10, 2), nullable=False, default=0)

    awb_status = Column(String(50), nullable=True)
    dispute_status = Column(String(20), nullable=False, default=Dispute_Status.new.value, index=True)
    action_taken = Column(String(100), nullable=True)

    discrepancy_date = Column(TIMESTAMP(timezone=True), nullable=False, default=time_now)
    dispute_raised_at = Column(TIMESTAMP(timezone=True), nullable=True)

    order = relationship("Order", lazy="joined")
