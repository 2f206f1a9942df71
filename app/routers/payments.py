"""
Razorpay payment endpoints: order creation and checkout signature verification.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.deps import body_of, body_schema, get_order_creator, get_payment_verifier
from app.errors import GatewayError, SignatureMismatch
from app.logging_config import get_logger
from app.schemas_pkg import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderResponse,
    ErrorResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from app.services.order_service import OrderCreator
from app.services.verification_service import PaymentVerifier

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Razorpay Payments"])

VERIFIED = "Payment verified successfully"


@router.post(
    "/create-payment-order",
    response_model=CreatePaymentOrderResponse,
    openapi_extra=body_schema(CreatePaymentOrderRequest),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_payment_order(
    body: CreatePaymentOrderRequest = Depends(body_of(CreatePaymentOrderRequest)),
    creator: OrderCreator = Depends(get_order_creator),
):
    try:
        order = await creator.create_order(body.amount, body.currency, body.receipt)
    except GatewayError as e:
        logger.error("order_create_failed", gateway_message=e.message, upstream_status=e.upstream_status)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to create payment order", "message": e.message},
        )
    return {"success": True, "order": order.to_dict()}


@router.post(
    "/verify-payment",
    response_model=VerifyPaymentResponse,
    openapi_extra=body_schema(VerifyPaymentRequest),
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def verify_payment(
    body: VerifyPaymentRequest = Depends(body_of(VerifyPaymentRequest)),
    verifier: PaymentVerifier = Depends(get_payment_verifier),
):
    result = await verifier.verify(body.order_id, body.payment_id, body.signature)
    if not result.is_valid:
        raise SignatureMismatch()

    response = {"success": True, "message": VERIFIED}
    if result.details is not None:
        response["payment_details"] = result.details.to_dict()
    elif result.details_unavailable:
        response["details_unavailable"] = True
    return response
