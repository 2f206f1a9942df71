import json
from typing import Any, Callable, Dict, Type
from urllib.parse import parse_qsl

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.errors import InvalidParameter
from app.logging_config import get_logger
from app.services.order_service import OrderCreator
from app.services.verification_service import PaymentVerifier

logger = get_logger(__name__)

JSON_TYPE = "application/json"
FORM_TYPE = "application/x-www-form-urlencoded"


def get_order_creator(request: Request) -> OrderCreator:
    return request.app.state.order_creator


def get_payment_verifier(request: Request) -> PaymentVerifier:
    return request.app.state.payment_verifier


def invalid_body() -> InvalidParameter:
    return InvalidParameter("Invalid request body")


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Request body as a dict. JSON and urlencoded forms are parsed; an empty
    body or any other content type yields {} so the field checks report
    what is missing.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    body = await request.body()
    if not body.strip():
        return {}

    if content_type == FORM_TYPE:
        try:
            return dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
        except UnicodeDecodeError:
            raise invalid_body()

    if content_type == JSON_TYPE or content_type.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError:
            raise invalid_body()
        if not isinstance(data, dict):
            raise invalid_body()
        return data

    return {}


def body_of(model: Type[BaseModel]) -> Callable:
    """Dependency that validates the JSON or form body into ``model``."""

    async def dependency(request: Request) -> BaseModel:
        payload = await read_payload(request)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.info("request_invalid", errors=e.error_count())
            raise invalid_body()

    return dependency


def body_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """openapi_extra documenting both accepted body encodings."""
    schema = model.model_json_schema()
    return {
        "requestBody": {
            "content": {JSON_TYPE: {"schema": schema}, FORM_TYPE: {"schema": schema}},
        }
    }
