"""
Handler decorators for error handling, logging, and response formatting.
"""
import functools
import json
import uuid
from typing import Callable, Any, Dict
from logger_config import get_logger

logger = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def proxy_response(status_code: int, body: Any, correlation_id: str) -> Dict[str, Any]:
    """Build an API gateway proxy integration response."""
    return {
        "statusCode": status_code,
        "headers": {**JSON_HEADERS, "X-Correlation-Id": correlation_id},
        "body": json.dumps(body),
    }


def lambda_handler(
    func: Callable[[Any, Any], Any]
) -> Callable[[Any, Any], Dict[str, Any]]:
    """
    Decorator for Lambda handlers behind an API gateway proxy integration.

    Provides:
    - Request correlation IDs for logging and the response headers
    - Conversion of plain return values into proxy responses
    - ValueError mapped to 400, any other exception to 500

    A handler may return a full proxy response (a dict with ``statusCode``)
    which is passed through with the correlation header added.

    Args:
        func: The handler function to decorate

    Returns:
        Decorated handler function
    """
    @functools.wraps(func)
    def wrapper(event: Any, context: Any) -> Dict[str, Any]:
        correlation_id = str(uuid.uuid4())

        logger.info(
            f"Handler {func.__name__} invoked",
            extra={
                "correlation_id": correlation_id,
                "handler": func.__name__,
                "request_id": getattr(context, "aws_request_id", None) if context else None
            }
        )

        try:
            result = func(event, context)
        except ValueError as e:
            logger.warning(
                f"Handler {func.__name__} validation error: {str(e)}",
                extra={"correlation_id": correlation_id}
            )
            return proxy_response(400, {
                "error": {"type": "ValidationError", "message": str(e)},
                "correlation_id": correlation_id,
            }, correlation_id)
        except Exception as e:
            logger.error(
                f"Handler {func.__name__} failed: {str(e)}",
                extra={"correlation_id": correlation_id},
                exc_info=True
            )
            return proxy_response(500, {
                "error": {"type": type(e).__name__, "message": "Internal server error"},
                "correlation_id": correlation_id,
            }, correlation_id)

        if isinstance(result, dict) and "statusCode" in result:
            result.setdefault("headers", {})["X-Correlation-Id"] = correlation_id
            response = result
        else:
            response = proxy_response(200, result, correlation_id)

        logger.info(
            f"Handler {func.__name__} completed with {response['statusCode']}",
            extra={"correlation_id": correlation_id}
        )
        return response

    return wrapper
