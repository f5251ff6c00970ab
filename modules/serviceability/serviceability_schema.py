from pydantic import BaseModel, Field
from typing import Optional, Literal


class RateCalculatorParamsModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    shipment_type: Literal["forward", "rto"] = "forward"
    weight: float = Field(gt=0, allow_inf_nan=False)
    length: Optional[float] = Field(None, allow_inf_nan=False)
    breadth: Optional[float] = Field(None, allow_inf_nan=False)
    height: Optional[float] = Field(None, allow_inf_nan=False)
    payment_mode: str = "Prepaid"
    cod_amount: Optional[float] = Field(0.0, allow_inf_nan=False)
    # staff may price for another category, clients always get their own
    user_category: Optional[str] = None


class RateCalculatorResponseModel(BaseModel):
    carrier_code: str
    carrier_name: str
    service_type: str
    logo: Optional[str] = None
    zone: str
    rate_card_version: int
    freight: float
    cod_charges: float
    gst_amount: float
    total: float
    chargeable_weight: float
    volumetric_weight: float
