from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

# schema
from schema.base import DBBaseModel


class WeightDiscrepancyInsertModel(BaseModel):
    awb_number: str
    charged_weight: float = Field(gt=0)
    awb_status: Optional[str] = None


class DisputeResolutionModel(BaseModel):
    accepted: bool


class WeightDiscrepancyResponseModel(DBBaseModel):
    awb_number: str
    client_id: int
    order_id: Optional[int] = None
    declared_weight: float
    charged_weight: float
    weight_discrepancy: float
    deduction_amount: float
    awb_status: Optional[str] = None
    dispute_status: str
    action_taken: Optional[str] = None
    discrepancy_date: datetime
    dispute_raised_at: Optional[datetime] = None
