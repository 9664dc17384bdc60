"""
API v1 routes - registration and payment webhook.

The webhook endpoint reads the raw request body itself; the signature is
checked against those exact bytes, so the body must never be parsed as
JSON by the framework first.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from assetpay.api.dependencies import get_registration_service, get_webhook_service
from assetpay.api.models import ErrorResponse, RegisterRequest, RegisterResponse, WebhookAck
from assetpay.domain.exceptions import (
    DuplicateRegistration,
    InvalidInput,
    InvalidPayload,
    InvalidSignature,
    MissingMetadata,
    PaymentGatewayError,
    PriceMismatch,
    RecordNotFound,
)
from assetpay.domain.reconciliation import WebhookReconciliationService
from assetpay.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input, price mismatch or duplicate"},
        500: {"model": ErrorResponse, "description": "Payment provider or storage failure"},
    },
    summary="Register a customer",
    description="Validate the registration and its price, create a payment and "
    "store a pending registration. Returns the client secret to complete payment.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a customer and create their payment.

    - **email**: Valid email address, unique per registration
    - **company**: Company name
    - **assets**: Number of assets (positive)
    - **duration**: Months (positive)
    - **pricing**: Price shown to the customer; must match the server's price
    """
    try:
        result = service.register(
            name=request_data.name,
            email=request_data.email,
            company=request_data.company,
            asset_count=request_data.assets,
            duration_months=request_data.duration,
            price=request_data.pricing,
        )
    except (InvalidInput, PriceMismatch) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except DuplicateRegistration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A registration with this email already exists",
        ) from None
    except PaymentGatewayError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment provider error",
        ) from None

    return RegisterResponse(
        message="Proceed to payment",
        payment_handle=result.payment_handle,
        record_id=result.record_id,
    )


def _reject(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"received": False, "message": message},
    )


@router.post(
    "/payment-webhook",
    response_model=WebhookAck,
    responses={400: {"model": WebhookAck, "description": "Rejected event"}},
    summary="Payment provider webhook",
    description="Receives signed payment events and settles the matching registration.",
)
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    service: WebhookReconciliationService = Depends(get_webhook_service),
) -> WebhookAck | JSONResponse:
    """
    Apply a payment event.

    Acknowledges applied, duplicate and ignored events with 200 so the
    provider stops retrying. Store failures propagate as 500 and are retried.
    """
    payload = await request.body()

    try:
        await run_in_threadpool(service.handle_event, payload, stripe_signature or "")
    except InvalidSignature as e:
        return _reject(f"Webhook Error: {e}")
    except InvalidPayload:
        return _reject("Invalid payload")
    except MissingMetadata:
        return _reject("Missing metadata")
    except PriceMismatch:
        return _reject("Price mismatch")
    except RecordNotFound:
        return _reject("Registration not found")

    return WebhookAck(received=True)
