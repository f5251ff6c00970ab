from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


USER_CATEGORIES = ["New User", "Basic User", "Lite User", "Advanced", "Advanced User"]


class Client(DBBase, DBBaseClass):
    __tablename__ = "client"

    client_code = Column(String(50), nullable=False, unique=True)
    company_name = Column(String(255), nullable=False)
    email = Column(String(150), nullable=True)

    # decides which rate card applies to the client
    user_category = Column(String(50), nullable=False, default="New User")

    orders = relationship("Order", back_populates="client", lazy="noload")
