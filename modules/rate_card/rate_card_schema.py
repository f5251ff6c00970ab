from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union

# schema
from schema.base import DBBaseModel


class WeightSlabModel(BaseModel):
    condition: str
    zones: Dict[str, Union[int, float]]


class CodChargesModel(BaseModel):
    percentage: float = Field(ge=0)
    minimum_amount: float = Field(ge=0)
    gst_additional: bool = True


class ZoneDefinitionModel(BaseModel):
    zone: str
    definition: str


class RateCardInsertModel(BaseModel):
    user_category: str
    forward_charges: List[WeightSlabModel] = Field(min_length=1)
    rto_charges: List[WeightSlabModel] = Field(min_length=1)
    cod_charges: CodChargesModel
    zone_definitions: List[ZoneDefinitionModel] = []
    terms_and_conditions: List[str] = Field(min_length=1)


class RateCardResponseModel(DBBaseModel):
    user_category: str
    carrier_id: Optional[int] = None
    version: int
    effective_from: datetime
    effective_to: Optional[datetime] = None
    is_current: Optional[bool] = None
    forward_charges: list
    rto_charges: list
    cod_charges: dict
    zone_definitions: list = []
    terms_and_conditions: list = []
    updated_by: Optional[str] = None
