"""
Pakman (ePak) API client: shipping quotation.

Optional env: PAKMAN_API_URL (defaults to the public production API).
"""

import http.client
import json
import os
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

DEFAULT_API_BASE = "https://api-public.pakman.com.br"
QUOTATIONS_PATH = "/pak/v1/ePak/quotations"


class PakmanAPIError(Exception):
    """Raised when the Pakman API answers with an error or is unreachable.

    ``status`` and ``body`` are set only when the API actually answered.
    """

    def __init__(self, message: str, status: int | None = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


@dataclass(frozen=True)
class CarrierReply:
    status: int
    body: Any


@dataclass(frozen=True)
class ErrorBody:
    """Best-effort view of an error body: structured, opaque or absent."""

    kind: str
    payload: Any = None

    @property
    def carrier_message(self) -> str | None:
        """Pakman puts its own error message under ``data``."""
        if self.kind != "structured":
            return None
        message = self.payload.get("data")
        if not message:
            return None
        return message if isinstance(message, str) else json.dumps(message)


def parse_error_body(body: Any) -> ErrorBody:
    if body is None or body == "" or body == b"":
        return ErrorBody("absent")
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return ErrorBody("opaque", body)
    if isinstance(body, dict):
        return ErrorBody("structured", body)
    return ErrorBody("opaque", body)


def _decode_body(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _read_error_body(e: urllib.error.HTTPError) -> str:
    if not e.fp:
        return ""
    try:
        return e.read().decode("utf-8", errors="replace")
    except (OSError, http.client.HTTPException):
        return ""


def request_quotation(apikey: str, body: dict[str, Any], timeout: float) -> CarrierReply:
    """
    Call the Pakman quotation API once (no retries).

    Args:
        apikey: Merchant key sent as ``x-api-key``.
        body: ``{"address": {"zipCode": ...}, "itens": [...]}``.
        timeout: Seconds before the request is abandoned.

    Returns:
        CarrierReply with the HTTP status and the decoded body (dict, text or None).

    Raises:
        PakmanAPIError: On HTTP error status (with status/body) or on
            connection/timeout failures (without status/body).
    """
    base = (os.environ.get("PAKMAN_API_URL") or DEFAULT_API_BASE).rstrip("/")
    url = f"{base}{QUOTATIONS_PATH}"
    data = json.dumps(body).encode("utf-8")

    req = urllib.request.Request(
        url,
        data=data,
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": apikey,
        },
    )

    try:
        with urllib.request.urlopen(
            req, timeout=timeout, context=ssl.create_default_context()
        ) as resp:
            status = resp.status
            raw = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        raise PakmanAPIError(str(e), status=e.code, body=_read_error_body(e) or None) from e
    except urllib.error.URLError as e:
        raise PakmanAPIError(str(e.reason)) from e
    except TimeoutError as e:
        raise PakmanAPIError(str(e) or "timed out") from e
    except OSError as e:
        raise PakmanAPIError(str(e)) from e
    except http.client.HTTPException as e:
        # resposta truncada ou status inválido
        raise PakmanAPIError(str(e) or type(e).__name__) from e

    return CarrierReply(status=status, body=_decode_body(raw))
