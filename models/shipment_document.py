from sqlalchemy import Column, String, Integer, ForeignKey, Boolean

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


DOCUMENT_TYPES = ["epod", "sorter_image", "qc_image"]


class Shipment_Document(DBBase, DBBaseClass):
    __tablename__ = "shipment_document"

    waybill = Column(String(100), nullable=False, index=True)
    order_id = Column(String(255), nullable=True)
    return_id = Column(String(255), nullable=True)

    document_type = Column(String(30), nullable=False)
    image_url = Column(String(500), nullable=False)
    s3_key = Column(String(500), nullable=True)

    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(50), nullable=True, default="image/jpeg")
    processed = Column(Boolean, nullable=False, default=False)

    order_ref = Column(Integer, ForeignKey("order.id"), nullable=True, index=True)

    @classmethod
    def document_exists(cls, waybill: str, document_type: str, image_url: str, db=None):
        db = db or get_db_session()
        return (
            db.query(cls)
            .filter(
                cls.waybill == waybill,
                cls.document_type == document_type,
                cls.image_url == image_url,
            )
            .first()
        )
