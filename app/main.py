# app/main.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import Settings, load_settings
from app.errors import PaymentError
from app.logging_config import configure_logging, get_logger
from app.middleware import request_id_middleware
from app.routers import health, payments
from app.services.order_service import OrderCreator
from app.services.payments.base import PaymentGateway
from app.services.payments.razorpay_adapter import RazorpayGateway
from app.services.verification_service import PaymentVerifier

logger = get_logger(__name__)


def build_gateway(settings: Settings) -> RazorpayGateway:
    return RazorpayGateway(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET.get_secret_value(),
        base_url=settings.RAZORPAY_API_BASE,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


# ---------------------------------------------
# ERROR HANDLERS
# ---------------------------------------------
async def payment_error_handler(request: Request, exc: PaymentError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown path or unsupported method on a known path
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})


def create_app(settings: Optional[Settings] = None, gateway: Optional[PaymentGateway] = None) -> FastAPI:
    """
    Build the API. Raises ConfigurationError when credentials are missing.

    ``gateway`` replaces the Razorpay client, mainly for tests.
    """
    settings = settings or load_settings()
    configure_logging(settings.APP_NAME, settings.ENVIRONMENT, settings.LOG_LEVEL)

    if gateway is None:
        gateway = build_gateway(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("server_starting", environment=settings.ENVIRONMENT, port=settings.PORT)
        yield
        await gateway.aclose()

    # ---------------------------------------------
    # APP INIT
    # ---------------------------------------------
    app = FastAPI(
        title="Razorpay Backend API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.order_creator = OrderCreator(gateway, environment=settings.ENVIRONMENT)
    app.state.payment_verifier = PaymentVerifier(
        settings.key_secret,
        gateway=gateway,
        fetch_details=settings.FETCH_PAYMENT_DETAILS,
    )

    # ---------------------------------------------
    # MIDDLEWARE
    # ---------------------------------------------
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
        max_age=86400,
    )

    app.add_exception_handler(PaymentError, payment_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # ---------------------------------------------
    # ROUTERS
    # ---------------------------------------------
    app.include_router(health.router)
    app.include_router(payments.router)

    return app
