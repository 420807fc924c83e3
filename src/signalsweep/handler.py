"""Serverless entry point (API Gateway or scheduled trigger)."""

import json
from datetime import UTC, datetime
from typing import Any

import structlog

from signalsweep.errors import StoreError, UnexpectedError
from signalsweep.jobs.sweep import run_sweep
from signalsweep.log import configure_logging

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _request_method(event: Any) -> str | None:
    if not isinstance(event, dict):
        return None
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return str(method).upper() if method else None


def _json_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {**CORS_HEADERS, "Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _error_response(error: Exception) -> dict[str, Any]:
    return _json_response(
        500,
        {
            "success": False,
            "error": str(error) or "Unknown error",
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    if _request_method(event) == "OPTIONS":
        return {"statusCode": 200, "headers": dict(CORS_HEADERS), "body": "ok"}

    try:
        configure_logging(fmt="json")
        result = run_sweep()
        return _json_response(200, result.to_payload())
    except StoreError as e:
        logger.error("Signal cleanup failed", error=str(e), error_type="store")
        return _error_response(e)
    except Exception as e:
        logger.exception("Signal cleanup fatal error", error_type="unexpected")
        return _error_response(UnexpectedError(str(e)))
