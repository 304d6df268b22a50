"""
Handler for the calculate shipping module (Pakman carrier).

POST body: { "params": { "to": { "zip": "01310-100" }, "items": [ ... ] }, "application": { "data": {}, "hidden_data": { "apikey": "..." } } }
Response: { "free_shipping_from_value": 150, "shipping_services": [ { "label": "Transportadora", "shipping_line": { ... } } ] }
"""

import json
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.parser import parse
from aws_lambda_powertools.utilities.typing import LambdaContext

from shared.responses import error_response, http_response
from schemas import CalculateShippingInput
from service import CalculateShippingError, calculate_shipping

logger = Logger(service="shipping")


@logger.inject_lambda_context(clear_state=True)
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    method = event.get("requestContext", {}).get("http", {}).get("method")

    # CORS Preflight
    if method == "OPTIONS":
        return http_response(200, {})

    if method != "POST":
        return http_response(405, {"error": "METHOD_NOT_ALLOWED", "message": "Use POST."})

    store_id = _store_id(event)
    if store_id:
        logger.append_keys(store_id=store_id)

    body = _body_json(event)
    if not body:
        return error_response(400, "CALCULATE_INVALID_BODY", "JSON body with params and application is required")

    try:
        payload = parse(event=body, model=CalculateShippingInput)
    except ValueError as e:
        logger.warning("Validação: %s", e)
        return error_response(400, "CALCULATE_INVALID_PARAMS", str(e))

    try:
        return http_response(200, calculate_shipping(payload))
    except CalculateShippingError as e:
        logger.warning("Calculate shipping %s: %s", e.code, e.message)
        return error_response(e.status_code, e.code, e.message)
    except Exception as e:
        logger.exception("Erro no cálculo de frete")
        return error_response(500, "CALCULATE_INTERNAL_ERR", str(e))


def _store_id(event: dict) -> str | None:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == "x-store-id":
            return str(value)
    return None


def _body_json(event: dict) -> dict:
    body = event.get("body")
    if body is None:
        return {}
    if isinstance(body, str):
        try:
            return json.loads(body) if body else {}
        except json.JSONDecodeError:
            return {}
    return body if isinstance(body, dict) else {}
