from .rate_card_controller import rate_card_router
