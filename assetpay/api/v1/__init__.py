"""
API v1 package.

Contains versioned API routes for registration, payment webhooks and
customer surveys.
"""

from fastapi import APIRouter

from assetpay.api.v1.routes import router as payments_router
from assetpay.api.v1.surveys import router as surveys_router

router = APIRouter()
router.include_router(payments_router)
router.include_router(surveys_router)

__all__ = ["router"]
