from .shipment_controller import track_router
