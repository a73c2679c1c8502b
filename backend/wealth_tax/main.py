"""
Wealth Tax Engine

A FastAPI application for tracking investment holdings and calculating
Italian taxes on capital gains and investment income.

Supports:
- Capital gains (26%) with FIFO lot matching
- Italian government bonds at 12.5%
- Dividends, coupons and interest (26%)
- Crypto holdings threshold warning (€2,000)
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .logging_config import setup_logger
from .models import init_db
from .routers import portfolio_router, tax_router

settings = get_settings()
logger = setup_logger("wealth_tax", settings.log_level)

# Create FastAPI app
app = FastAPI(
    title="Wealth Tax Engine",
    description="Track holdings and calculate Italian investment taxes",
    version="0.1.0"
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(portfolio_router)
app.include_router(tax_router)


@app.on_event("startup")
async def startup():
    """Initialize database on startup."""
    init_db()
    logger.info("Database ready, FIFO mode %s", settings.fifo_mode.value)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Wealth Tax Engine",
        "version": "0.1.0",
        "description": "Track holdings and calculate Italian investment taxes",
        "endpoints": {
            "portfolio": {
                "portfolios": "/portfolio/",
                "assets": "/portfolio/assets",
                "transactions": "/portfolio/transactions",
                "cash_flows": "/portfolio/cash-flows"
            },
            "tax": {
                "calculate": "/tax/calculate/{tax_year}",
                "report": "/tax/report/{tax_year}",
                "events": "/tax/events/{tax_year}",
                "crypto_threshold": "/tax/crypto-threshold"
            }
        },
        "tax_rates": {
            "Capital gains": "26%",
            "Italian government bonds": "12.5%",
            "Crypto": "26%",
            "Dividends and interest": "26%"
        },
        "documentation": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
