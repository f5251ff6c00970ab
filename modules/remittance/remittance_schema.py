from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class RemittanceCreateModel(BaseModel):
    client_id: int
    awbs: List[str] = Field(min_length=1)
    date: Optional[datetime] = None
    account_details: Optional[Dict[str, str]] = None
    upload_batch_id: Optional[str] = None


class RemittanceReferenceModel(BaseModel):
    remittance_number: str


class RemittanceOrderModel(RemittanceReferenceModel):
    awb_number: str


class RemittanceSettleModel(RemittanceReferenceModel):
    bank_transaction_id: Optional[str] = None


class RemittanceLineResponseModel(BaseModel):
    awb_number: str
    order_id: Optional[str] = None
    amount_collected: float
    delivered_date: Optional[datetime] = None


class RemittanceResponseModel(BaseModel):
    remittance_number: str
    client_id: int
    date: datetime
    remittance_date: datetime
    state: str
    total_remittance: float
    total_orders: int
    bank_transaction_id: Optional[str] = None
    processed_on: Optional[datetime] = None
    settlement_date: Optional[datetime] = None
    settled_by: Optional[str] = None
    account_details: Optional[dict] = None
    uploaded_by: Optional[str] = None
    orders: Optional[List[RemittanceLineResponseModel]] = None
