from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Boolean,
    TIMESTAMP,
    JSON,
    Index,
    func,
    or_,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, joinedload

from database import DBBaseClass, DBBase
from database.db import time_now
from context_manager.context import get_db_session


JSONType = JSON().with_variant(JSONB, "postgresql")


def normalize_category(user_category: str) -> str:
    if not user_category:
        return user_category
    user_category = user_category.strip()
    if user_category == "Advanced User":
        return "Advanced"
    return user_category


class Rate_Card(DBBase, DBBaseClass):
    __tablename__ = "rate_card"

    user_category = Column(String(50), nullable=False, index=True)

    carrier_id = Column(Integer, ForeignKey("carrier.id"), nullable=True, index=True)

    # versioning, effective_to null means currently active
    version = Column(Integer, nullable=False, default=1)
    effective_from = Column(TIMESTAMP(timezone=True), nullable=False, default=time_now)
    effective_to = Column(TIMESTAMP(timezone=True), nullable=True)
    is_current = Column(Boolean, nullable=True, default=True, index=True)

    # [{"condition": "0-250 gm", "zones": {"A": 45, ...}}, ...]
    forward_charges = Column(JSONType, nullable=False)
    rto_charges = Column(JSONType, nullable=False)

    # {"percentage": 1.8, "minimum_amount": 45, "gst_additional": true}
    cod_charges = Column(JSONType, nullable=False)

    zone_definitions = Column(JSONType, nullable=False, default=list)
    terms_and_conditions = Column(JSONType, nullable=False, default=list)

    updated_by = Column(String(255), nullable=True)

    carrier = relationship("Carrier", back_populates="rate_cards", lazy="joined")

    __table_args__ = (
        Index("ix_rate_card_category_carrier_current", "user_category", "carrier_id", "is_current"),
    )

    @classmethod
    def find_by_category(cls, user_category: str, db=None):
        """Current card for a category, exact match first then case-insensitive."""
        db = db or get_db_session()
        normalized = normalize_category(user_category)

        # legacy cards may have is_current unset
        current = or_(cls.is_current.is_(True), cls.is_current.is_(None))

        rate_card = (
            db.query(cls)
            .filter(cls.user_category == normalized, current, cls.is_deleted.is_(False))
            .order_by(cls.version.desc())
            .first()
        )

        if rate_card is None:
            rate_card = (
                db.query(cls)
                .filter(
                    func.lower(cls.user_category) == normalized.lower(),
                    current,
                    cls.is_deleted.is_(False),
                )
                .order_by(cls.version.desc())
                .first()
            )

        return rate_card

    @classmethod
    def find_by_carrier_and_category(cls, carrier_id: int, user_category: str, db=None):
        db = db or get_db_session()
        normalized = normalize_category(user_category)

        rate_card = (
            db.query(cls)
            .options(joinedload(cls.carrier))
            .filter(
                cls.carrier_id == carrier_id,
                cls.user_category == normalized,
                cls.is_current.is_(True),
                cls.is_deleted.is_(False),
            )
            .first()
        )

        if rate_card is None:
            rate_card = (
                db.query(cls)
                .options(joinedload(cls.carrier))
                .filter(
                    cls.carrier_id == carrier_id,
                    func.lower(cls.user_category) == normalized.lower(),
                    cls.is_current.is_(True),
                    cls.is_deleted.is_(False),
                )
                .first()
            )

        return rate_card

    @classmethod
    def find_current_by_carrier(cls, carrier_id: int, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(
                cls.carrier_id == carrier_id,
                cls.is_current.is_(True),
                cls.is_deleted.is_(False),
            )
            .order_by(cls.user_category.asc())
            .all()
        )

    @classmethod
    def find_rate_history(cls, carrier_id: int, user_category: str, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(
                cls.carrier_id == carrier_id,
                cls.user_category == normalize_category(user_category),
                cls.is_deleted.is_(False),
            )
            .order_by(cls.version.desc(), cls.effective_from.desc())
            .all()
        )

    def create_new_version(self, new_rate_data: dict, updated_by: str = None, db=None):
        """
        Archive this card and add its successor to the session.
        The caller owns the commit so both rows land together.
        """
        db = db or get_db_session()
        now = time_now()

        self.is_current = False
        self.effective_to = now
        db.add(self)

        new_rate = Rate_Card(
            user_category=self.user_category,
            carrier_id=self.carrier_id,
            version=(self.version or 1) + 1,
            effective_from=now,
            effective_to=None,
            is_current=True,
            forward_charges=new_rate_data.get("forward_charges", self.forward_charges),
            rto_charges=new_rate_data.get("rto_charges", self.rto_charges),
            cod_charges=new_rate_data.get("cod_charges", self.cod_charges),
            zone_definitions=new_rate_data.get("zone_definitions", self.zone_definitions),
            terms_and_conditions=new_rate_data.get(
                "terms_and_conditions", self.terms_and_conditions
            ),
            updated_by=updated_by,
        )
        db.add(new_rate)
        db.flush()

        return new_rate
