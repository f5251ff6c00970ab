from .weight_discrepancy_controller import weight_discrepancy_router
