"""
Calculate shipping service: free shipping rules plus a Pakman quotation.

Stateless: every call builds its own options, payload and response.
"""

import math
import re
from typing import Any

from aws_lambda_powertools import Logger

from shared.pakman import CarrierReply, PakmanAPIError, parse_error_body, request_quotation
from cart import cart_subtotal, expand_items
from free_shipping import evaluate_free_shipping
from schemas import (
    Additional,
    CalculateShippingInput,
    CalculateShippingResponse,
    DeliveryTime,
    MerchantOptions,
    ShippingLine,
    ShippingService,
    only_digits,
    optional_float,
)

logger = Logger(service="shipping")

# Checkout confirmation tolerates a longer wait than the live cart preview.
CHECKOUT_TIMEOUT_SEC = 8
PREVIEW_TIMEOUT_SEC = 6

DEFAULT_ORIGIN_ZIP = "00000000"
DEFAULT_LABEL = "Transportadora"
DEFAULT_POSTING_DEADLINE_DAYS = 3
CARRIER = "pakman transportadora"
SERVICE_NAME = "pakman_name"
SERVICE_CODE = "pakman"
FLAGS = ["pakman-ws", "pakman-transportadora"]


class CalculateShippingError(Exception):
    """Base for errors answered to the platform as ``{"error", "message"}``."""

    code = "CALCULATE_ERR"
    status_code = 409

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CalculateAuthError(CalculateShippingError):
    code = "CALCULATE_AUTH_ERR"


class CalculateEmptyCartError(CalculateShippingError):
    code = "CALCULATE_EMPTY_CART"
    status_code = 400


class CalculateFailedError(CalculateShippingError):
    code = "CALCULATE_FAILED"


class CalculateError(CalculateShippingError):
    code = "CALCULATE_ERR"


def request_timeout(is_checkout_confirmation: bool) -> int:
    return CHECKOUT_TIMEOUT_SEC if is_checkout_confirmation else PREVIEW_TIMEOUT_SEC


def origin_zip(from_zip: str | None, options: MerchantOptions) -> str:
    return only_digits(from_zip) or only_digits(options.zip) or DEFAULT_ORIGIN_ZIP


def build_quotation_body(destination_zip: str, itens: list[dict[str, Any]]) -> dict[str, Any]:
    return {"address": {"zipCode": destination_zip}, "itens": itens}


def _parse_days(value: Any) -> int | None:
    """Leading integer, like ``parseInt("5 dias", 10)``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    match = re.match(r"\s*([+-]?\d+)", str(value))
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # excede o limite de dígitos do int()
        return None


def map_carrier_error(err: PakmanAPIError) -> CalculateShippingError:
    """Carrier business errors keep Pakman's message; anything else is CALCULATE_ERR."""
    error_body = parse_error_body(err.body)
    if error_body.kind == "absent" and err.status is None:
        # sem resposta: timeout, DNS, conexão recusada
        logger.exception("Pakman request failed")
        return CalculateError(err.message)

    logger.warning("Pakman invalid result", extra={"status": err.status, "body": err.body})
    if error_body.carrier_message:
        return CalculateFailedError(error_body.carrier_message)
    if err.status is not None:
        return CalculateError(f"{err.message} ({err.status})")
    return CalculateError(err.message)


def build_shipping_service(
    reply: CarrierReply, payload: CalculateShippingInput, options: MerchantOptions
) -> ShippingService:
    """
    Map a Pakman reply into the platform shipping service object.

    Raises:
        PakmanAPIError: When the reply is not a usable quotation.
    """
    body = reply.body
    if reply.status != 200 or not isinstance(body, dict) or not body:
        raise PakmanAPIError("Invalid pakman calculate response", status=reply.status, body=body)
    cost = optional_float(body.get("cost"))
    days = _parse_days(body.get("serviceLevelAgreement"))
    if cost is None or days is None:
        raise PakmanAPIError("Invalid pakman calculate response", status=reply.status, body=body)

    params = payload.params
    from_address = params.from_.model_dump() if params.from_ else {}
    line = ShippingLine(
        **{"from": {**from_address, "zip": origin_zip(from_address.get("zip"), options)}},
        to=params.to.model_dump(),
        price=cost,
        total_price=cost,
        discount=0,
        delivery_time=DeliveryTime(days=days, working_days=True),
        posting_deadline={"days": DEFAULT_POSTING_DEADLINE_DAYS, **(options.posting_deadline or {})},
        flags=list(FLAGS),
    )

    additional = options.additional_price
    if additional:
        if additional > 0:
            line.other_additionals = [
                Additional(tag="additional_price", label="Adicional padrão", price=additional)
            ]
        else:
            # preço adicional negativo = desconto
            line.discount -= additional
        line.total_price += additional

    return ShippingService(
        label=options.label or DEFAULT_LABEL,
        carrier=CARRIER,
        service_name=SERVICE_NAME,
        service_code=SERVICE_CODE,
        shipping_line=line,
    )


def calculate_shipping(payload: CalculateShippingInput) -> dict[str, Any]:
    """
    Run the calculate shipping pipeline for one module request.

    Returns:
        Response dict with ``shipping_services`` and, when any rule applies,
        ``free_shipping_from_value``.

    Raises:
        CalculateShippingError: Subclass carrying the platform error code and HTTP status.
    """
    params = payload.params
    options = MerchantOptions.merge(payload.application.data, payload.application.hidden_data)
    destination_zip = only_digits(params.to.zip) if params.to else ""

    response = CalculateShippingResponse(
        free_shipping_from_value=evaluate_free_shipping(options, params.items, destination_zip),
    )
    if params.to is None:
        # preview de frete grátis, sem endereço de entrega
        return response.to_dict()

    if not options.apikey:
        raise CalculateAuthError("Apikey unset on app hidden data (merchant must configure the app)")
    if not params.items:
        raise CalculateEmptyCartError("Cannot calculate shipping without cart items")

    itens = expand_items(params.items)
    body = build_quotation_body(destination_zip, itens)
    logger.info(
        "Sending Pakman quotation",
        extra={"body": body, "cart_subtotal": cart_subtotal(params.items)},
    )

    try:
        reply = request_quotation(
            options.apikey, body, timeout=request_timeout(params.is_checkout_confirmation)
        )
        response.shipping_services.append(build_shipping_service(reply, payload, options))
    except PakmanAPIError as e:
        raise map_carrier_error(e) from e

    return response.to_dict()
