import json


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Store-Id",
    "Access-Control-Expose-Headers": "*",
}


def http_response(status_code: int, body: dict) -> dict:
    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body, ensure_ascii=False),
    }


def error_response(status_code: int, code: str, message: str) -> dict:
    """Module error shape expected by the platform: ``{"error", "message"}``."""
    return http_response(status_code, {"error": code, "message": message})
