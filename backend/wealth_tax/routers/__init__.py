from .portfolio import router as portfolio_router
from .tax import router as tax_router

__all__ = ["portfolio_router", "tax_router"]
