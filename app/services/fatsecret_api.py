from __future__ import annotations

import logging

import httpx

from app.config import settings, get_credentials
from app.services.fatsecret_auth import (
    ConsumerCredentials,
    build_protocol_params,
    build_signed_url,
    sign_request,
)

logger = logging.getLogger(__name__)

# FatSecret OAuth 1.0 error codes that mean the request could not be authenticated
_FS_AUTH_ERROR_CODES = {2, 4, 5, 6, 7, 8, 13, 14}  # Invalid key, signature, nonce, timestamp, token


class FatSecretAPIError(Exception):
    """Raised when FatSecret answers 200 OK with an error body."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"FatSecret error {code}: {message}")


class FatSecretAuthError(FatSecretAPIError):
    """Raised when FatSecret rejects the OAuth signature or consumer key."""


def _raise_for_error_body(data: dict) -> None:
    # FatSecret returns 200 OK with an error body for bad requests
    if not isinstance(data, dict) or "error" not in data:
        return
    err = data["error"]
    code = int(err.get("code", 0))
    msg = err.get("message", "Unknown error")
    logger.error("FatSecret search error: code=%s message=%s", code, msg)
    if code in _FS_AUTH_ERROR_CODES:
        raise FatSecretAuthError(code, msg)
    raise FatSecretAPIError(code, msg)


def build_search_url(
    query: str,
    credentials: ConsumerCredentials,
    max_results: int | None = None,
    page_number: int = 0,
) -> str:
    """Signed GET URL for a foods.search call."""
    api_params = {
        "method": "foods.search",
        "search_expression": query,
        "format": "json",
    }
    if max_results is not None:
        api_params["max_results"] = str(max_results)
    if page_number:
        api_params["page_number"] = str(page_number)

    # Credentials are checked before a nonce is drawn or anything is sent
    credentials.validate()
    oauth_params = build_protocol_params(credentials.consumer_key)
    signed = sign_request(
        method="GET",
        url=settings.fatsecret_api_url,
        protocol_params=oauth_params,
        request_params=api_params,
        credentials=credentials,
    )
    return build_signed_url(settings.fatsecret_api_url, signed.all_params)


async def search_foods(
    query: str,
    *,
    max_results: int | None = None,
    page_number: int = 0,
    credentials: ConsumerCredentials | None = None,
) -> dict:
    """Search the FatSecret food database with a signed GET. Returns the raw JSON."""
    if not query or not query.strip():
        raise ValueError("Search query must not be empty")
    if max_results is None:
        max_results = settings.search_max_results

    logger.info("FatSecret search: query='%s' max=%s page=%d", query, max_results, page_number)
    url = build_search_url(
        query,
        credentials or get_credentials(),
        max_results=max_results,
        page_number=page_number,
    )

    async with httpx.AsyncClient(timeout=settings.fatsecret_timeout) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        data = resp.json()

    _raise_for_error_body(data)
    logger.info("FatSecret search result: query='%s' found=%d", query, len(extract_foods(data)))
    return data


def extract_foods(data: dict) -> list[dict]:
    """Normalise foods.food (object, list or missing) into a list."""
    foods = (data.get("foods") or {}).get("food", [])
    if not isinstance(foods, list):
        foods = [foods]
    return foods
