# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, lease_engine
from shared.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from .models.contracts import calendar_events, contracts, greenwich_settlements, partners
from .router.contracts import (
    calendar_events_router,
    contracts_router,
    greenwich_settlements_router,
    partners_router,
    settlement_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s]: %(message)s",
)

# Create all tables
Base.metadata.create_all(bind=lease_engine)

app = FastAPI(title="Lease Contract Service API")

# 1️⃣ CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2️⃣ Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(contracts_router.router)
app.include_router(settlement_router.router)
app.include_router(partners_router.router)
app.include_router(calendar_events_router.router)
app.include_router(greenwich_settlements_router.router)


@app.get("/api/health")
def health():
    return {"status": "healthy"}
