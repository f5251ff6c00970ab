from .remittance_controller import remittance_router
