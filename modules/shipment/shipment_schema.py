from pydantic import BaseModel, ConfigDict
from typing import Optional


class ScanStatusModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    Status: Optional[str] = None
    StatusType: Optional[str] = None
    StatusDateTime: Optional[str] = None
    StatusLocation: Optional[str] = None
    Instructions: Optional[str] = None


class ScanShipmentModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    AWB: str
    ReferenceNo: Optional[str] = None
    NSLCode: Optional[str] = None
    Sortcode: Optional[str] = None
    PickUpDate: Optional[str] = None
    Status: Optional[ScanStatusModel] = None


# Delhivery scan push body
class ScanPushModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    Shipment: ScanShipmentModel


class EpodWebhookModel(BaseModel):
    waybill: Optional[str] = None
    EPOD: Optional[str] = None
    orderID: Optional[str] = None


class SorterImageWebhookModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    Waybill: Optional[str] = None
    Weight_images: Optional[str] = None


class QcImageWebhookModel(BaseModel):
    waybillId: Optional[str] = None
    returnId: Optional[str] = None
    Image: Optional[str] = None
