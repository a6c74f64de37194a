"""
Lambda handler served behind the API gateway proxy integration.

This module is what the deployment archive ships. It answers every method
on every path with a JSON description of the request it received.
"""
import base64
import binascii
import json
import os
from logger_config import get_logger
from utils.decorators import lambda_handler

logger = get_logger(__name__)


def parse_body(event: dict):
    """
    Decode the request body of a proxy event.

    Raises:
        ValueError: If a JSON content type carries a body that is not JSON,
            or a base64 flagged body does not decode
    """
    body = event.get('body')
    if body is None:
        return None
    if event.get('isBase64Encoded'):
        # Binary payloads are reported by decoded size only
        try:
            return {'bytes': len(base64.b64decode(body, validate=True))}
        except binascii.Error:
            raise ValueError('Request body is not valid base64')
    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    if headers.get('content-type', '').startswith('application/json'):
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f'Request body is not valid JSON: {e.msg}')
    return body


@lambda_handler
def handle(event, context):
    """Echo the method, path, query and body of the proxied request."""
    method = event.get('httpMethod')
    path = event.get('path') or '/'
    if not method:
        raise ValueError('Event is not an API gateway proxy request')

    logger.info(f'{method} {path}')
    return {
        'method': method,
        'path': path,
        'query': event.get('queryStringParameters') or {},
        'body': parse_body(event),
        'function': os.environ.get('AWS_LAMBDA_FUNCTION_NAME'),
    }
