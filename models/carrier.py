from sqlalchemy import Column, String, Integer, Boolean, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, validates

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


JSONType = JSON().with_variant(JSONB, "postgresql")

SERVICE_TYPES = ["surface", "air", "premium", "express"]

STANDARD_ZONE_LABELS = ["A", "B", "C", "D", "E", "F"]
REGIONAL_ZONE_LABELS = ["City", "Regional", "Metro", "RestOfIndia", "SpecialZone"]

OPTION1_SLAB_LABELS = [
    "0-250 gm",
    "250-500 gm",
    "Add. 500 gm till 5 kg",
    "Upto 5 kgs",
    "Add. 1 kgs till 10 kg",
    "Upto 10 kgs",
    "Add. 1 kgs",
]
OPTION2_SLAB_LABELS = [
    "0-5 kg",
    "Add. 1 kg till 9 kg",
    "10 kg",
    "Add. 1 kg till 19 kg",
    "20 kg",
    "Add. 1 kg above 20 kg",
]


class Carrier(DBBase, DBBaseClass):
    __tablename__ = "carrier"

    # e.g. DELHIVERY_SURFACE, DELHIVERY_AIR
    carrier_code = Column(String(100), nullable=False, unique=True)
    display_name = Column(String(255), nullable=False)
    # e.g. DELHIVERY, DTDC
    carrier_group = Column(String(100), nullable=False, index=True)
    service_type = Column(String(20), nullable=False)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    priority_order = Column(Integer, nullable=False, default=0)

    # standard: A-F, regional: City / Regional / Metro / Rest of India / Special
    zone_type = Column(String(20), nullable=False, default="standard")
    # option1: granular 250 gm slabs, option2: 5 / 10 / 20 kg slabs
    weight_slab_type = Column(String(20), nullable=False, default="option1")

    api_config = Column(JSONType, nullable=True)
    description = Column(String(500), nullable=True, default="")
    logo_url = Column(String(500), nullable=True, default="")

    rate_cards = relationship("Rate_Card", back_populates="carrier", lazy="noload")

    @validates("carrier_code", "carrier_group")
    def _upper(self, key, value):
        return value.strip().upper() if value else value

    @validates("service_type")
    def _service_type(self, key, value):
        if value not in SERVICE_TYPES:
            raise ValueError(f"Invalid service type: {value}")
        return value

    @property
    def zone_labels(self):
        if self.zone_type == "regional":
            return list(REGIONAL_ZONE_LABELS)
        return list(STANDARD_ZONE_LABELS)

    @property
    def weight_slab_labels(self):
        if self.weight_slab_type == "option2":
            return list(OPTION2_SLAB_LABELS)
        return list(OPTION1_SLAB_LABELS)

    @classmethod
    def find_active(cls, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(cls.is_active.is_(True), cls.is_deleted.is_(False))
            .order_by(cls.priority_order.asc(), cls.display_name.asc())
            .all()
        )

    @classmethod
    def find_by_code(cls, code: str, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(cls.carrier_code == code.strip().upper(), cls.is_deleted.is_(False))
            .first()
        )
