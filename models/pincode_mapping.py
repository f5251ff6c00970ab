from sqlalchemy import Column, String, Integer, Index

from database import DBBaseClass, DBBase


class Pincode_Mapping(DBBase, DBBaseClass):

    __tablename__ = "pincode_mapping"

    pincode = Column(Integer, nullable=False, unique=True)
    # City and state are stored in lowercase for case-insensitive comparisons
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)

    __table_args__ = (
        Index("ix_pincode_mapping_pincode_city_state", "pincode", "city", "state"),
    )

    @classmethod
    def create(cls, pincode, city: str, state: str):
        return cls(pincode=int(pincode), city=city.strip().lower(), state=state.strip().lower())
