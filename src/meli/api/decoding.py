"""
Response decoding for typed client calls.

Decoding failures are reported as DecodeError so that a mismatch between
a model and the payload is never mistaken for an authorization problem.
"""

import logging
from typing import Any, Optional, Type, TypeVar

import requests
from pydantic import TypeAdapter, ValidationError

from .exceptions import DecodeError, MeliAPIError, MeliAuthenticationError
from .models import ErrorResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_CONTENT = 204


def parse_error_response(response: requests.Response) -> Optional[ErrorResponse]:
    """Parse an error body, returning None if it is not the API error shape."""
    try:
        return ErrorResponse.model_validate(response.json())
    except (TypeError, ValueError):
        return None


def raise_for_failure(response: requests.Response) -> None:
    """
    Raise the SDK exception matching a non-success response.

    Raises:
        MeliAuthenticationError: For 401 and 403
        MeliAPIError: For any other non-2xx status
    """
    if response.ok:
        return

    error = parse_error_response(response)
    detail = error.message if error is not None else (response.reason or "")
    message = f"Mercado Libre API error ({response.status_code}): {detail}"

    if response.status_code in (401, 403):
        logger.error(f"Authentication failed ({response.status_code}): {detail}")
        raise MeliAuthenticationError(
            f"{message}. The access token is invalid or expired and could not be refreshed; "
            f"authorize the application again.",
            status_code=response.status_code,
            error_response=error,
        )

    logger.error(message)
    raise MeliAPIError(message, status_code=response.status_code, error_response=error)


def decode_response(response: requests.Response, model: Type[T]) -> T:
    """
    Decode a successful response body into ``model``.

    Args:
        response: Response returned by the refresh policy
        model: A pydantic model, ``List[Model]`` or any type a pydantic
               TypeAdapter accepts

    Returns:
        Decoded value (None for 204 No Content, or an empty body when
        ``model`` accepts None)

    Raises:
        MeliAuthenticationError, MeliAPIError: If the response is not successful
        DecodeError: If the body is empty, not JSON or does not match ``model``
    """
    raise_for_failure(response)

    if not response.content:
        return _decode_empty(response, model)

    try:
        payload: Any = response.json()
    except ValueError as e:
        raise DecodeError(
            f"Response body is not valid JSON: {e}", status_code=response.status_code
        ) from e

    try:
        return TypeAdapter(model).validate_python(payload)
    except ValidationError as e:
        logger.error(f"Response does not match {model!r}: {e.error_count()} errors")
        raise DecodeError(
            f"Response does not match {model!r}: {e}", status_code=response.status_code
        ) from e


def _decode_empty(response: requests.Response, model: Type[T]) -> T:
    if response.status_code == NO_CONTENT:
        return None

    try:
        return TypeAdapter(model).validate_python(None)
    except ValidationError as e:
        logger.error(f"Empty response body does not match {model!r}")
        raise DecodeError(
            f"Response body is empty, expected {model!r}", status_code=response.status_code
        ) from e
