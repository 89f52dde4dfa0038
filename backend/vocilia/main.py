from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vocilia.core.config import settings
from vocilia.routers import (
    business_invoices,
    payment_batches,
    payment_transactions,
    reconciliation,
    rewards,
)

OPENAPI_TAGS = [
    {"name": "Rewards", "description": "Calculate, verify and summarize customer cashback."},
    {"name": "Payment Batches", "description": "Run and inspect weekly payout batches."},
    {"name": "Payment Transactions", "description": "Inspect and retry Swish payouts."},
    {"name": "Reconciliation", "description": "Per-batch reconciliation reports."},
    {"name": "Business Invoices", "description": "Invoices for rewards paid plus admin fee."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Vocilia payments API: feedback cashback rewards, weekly Swish payout "
        "batches, reconciliation and business invoicing."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rewards.router, prefix="/v1/rewards", tags=["Rewards"])
app.include_router(
    payment_batches.router,
    prefix="/v1/payment_batches",
    tags=["Payment Batches"],
)
app.include_router(
    payment_transactions.router,
    prefix="/v1/payment_transactions",
    tags=["Payment Transactions"],
)
app.include_router(reconciliation.router, prefix="/v1/reconciliation", tags=["Reconciliation"])
app.include_router(
    business_invoices.router,
    prefix="/v1/business_invoices",
    tags=["Business Invoices"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
