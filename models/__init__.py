from .client import Client
from .order import Order
from .pincode_mapping import Pincode_Mapping

# carriers and pricing
from .carrier import Carrier
from .rate_card import Rate_Card

# tracking
from .shipment_tracking_event import Shipment_Tracking_Event
from .shipment_document import Shipment_Document

# COD remittance
from .remittance import Remittance, Remittance_Order

# weight reconciliation
from .weight_discrepancy import Weight_Discrepancy
