from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import random
import secrets
import string
import time
from dataclasses import dataclass
from typing import Mapping, NamedTuple
from urllib.parse import quote, urlencode, urlsplit

from pydantic import SecretStr

logger = logging.getLogger(__name__)

OAUTH_SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
OAUTH_SIGNATURE_PARAM = "oauth_signature"

NONCE_ALPHABET = string.ascii_letters + string.digits
DEFAULT_NONCE_LENGTH = 32


class OAuthSigningError(Exception):
    """Base class for failures while signing an outbound request."""


class ConfigurationError(OAuthSigningError):
    """Consumer credentials are missing or empty."""


class EncodingError(OAuthSigningError):
    """Input cannot be represented as UTF-8 text."""


class RandomSourceError(OAuthSigningError):
    """The random source used for nonces is unavailable."""


class ParameterCollisionError(OAuthSigningError, ValueError):
    """Protocol and request parameters share a key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Parameter '{key}' is set by both protocol and request parameters")


@dataclass(frozen=True)
class ConsumerCredentials:
    consumer_key: str
    consumer_secret: SecretStr

    def __post_init__(self):
        if isinstance(self.consumer_secret, str):
            object.__setattr__(self, "consumer_secret", SecretStr(self.consumer_secret))

    def validate(self) -> None:
        """Raise ConfigurationError unless both halves are present."""
        if not self.consumer_key:
            raise ConfigurationError("OAuth consumer key is not configured")
        if self.consumer_secret is None or not self.consumer_secret.get_secret_value():
            raise ConfigurationError("OAuth consumer secret is not configured")


class SignedRequest(NamedTuple):
    all_params: dict[str, str]
    signature: str


def percent_encode(s: str | bytes) -> str:
    """RFC 3986 percent encoding (unreserved characters only are left as is)."""
    if isinstance(s, bytes):
        try:
            s = s.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError("Value is not valid UTF-8") from exc
    try:
        encoded = str(s).encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError("Value cannot be encoded as UTF-8") from exc
    # quote() leaves only letters, digits and "_.-~" alone when safe is empty
    return quote(encoded, safe="")


def generate_nonce(length: int = DEFAULT_NONCE_LENGTH, rng: random.Random | None = None) -> str:
    """Random alphanumeric nonce.

    Args:
        length: Number of characters.
        rng: Random source. Defaults to a fresh ``secrets.SystemRandom`` per call,
            tests pass a seeded ``random.Random``.
    """
    if length <= 0:
        raise ValueError("Nonce length must be positive")
    if rng is None:
        rng = secrets.SystemRandom()
    try:
        return "".join(rng.choice(NONCE_ALPHABET) for _ in range(length))
    except (NotImplementedError, OSError) as exc:
        raise RandomSourceError("Random source is unavailable") from exc


def build_signature_base(method: str, url: str, params: Mapping[str, str]) -> str:
    """Canonical signature base string: METHOD&encoded_url&encoded_params."""
    parts = urlsplit(url)
    if parts.query or parts.fragment:
        raise ValueError("Signature base URL must not carry a query string or fragment")

    # Sorted on the raw keys (value breaks ties), encoded afterwards
    entries = sorted(
        ((k, v) for k, v in params.items() if k != OAUTH_SIGNATURE_PARAM),
        key=lambda item: (item[0], str(item[1])),
    )
    param_string = "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in entries)
    return "&".join([method.upper(), percent_encode(url), percent_encode(param_string)])


def build_signing_key(consumer_secret: str | SecretStr, token_secret: str = "") -> str:
    if isinstance(consumer_secret, SecretStr):
        consumer_secret = consumer_secret.get_secret_value()
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"


def hmac_sha1_signature(base_string: str, signing_key: str) -> str:
    """Base64-encoded HMAC-SHA1 of the base string."""
    hashed = hmac.new(
        signing_key.encode("utf-8"),
        base_string.encode("utf-8"),
        hashlib.sha1,
    )
    return base64.b64encode(hashed.digest()).decode("utf-8")


def merge_params(
    protocol_params: Mapping[str, str],
    request_params: Mapping[str, str],
) -> dict[str, str]:
    """Combine protocol and request parameters, rejecting shared keys.

    Protocol parameters come first so the wire order matches the usual
    ``oauth_*`` then API parameters layout.
    """
    if OAUTH_SIGNATURE_PARAM in request_params or OAUTH_SIGNATURE_PARAM in protocol_params:
        raise ParameterCollisionError(OAUTH_SIGNATURE_PARAM)
    for key in request_params:
        if key in protocol_params:
            raise ParameterCollisionError(key)
    return {**protocol_params, **request_params}


def build_protocol_params(
    consumer_key: str,
    *,
    nonce: str | None = None,
    timestamp: int | None = None,
    rng: random.Random | None = None,
) -> dict[str, str]:
    """Two-legged OAuth 1.0 protocol parameters for one request."""
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce if nonce is not None else generate_nonce(rng=rng),
        "oauth_signature_method": OAUTH_SIGNATURE_METHOD,
        "oauth_timestamp": str(timestamp if timestamp is not None else int(time.time())),
        "oauth_version": OAUTH_VERSION,
    }


def sign_request(
    method: str,
    url: str,
    protocol_params: Mapping[str, str],
    request_params: Mapping[str, str],
    credentials: ConsumerCredentials,
) -> SignedRequest:
    """Sign a request with HMAC-SHA1 and return the parameters to send."""
    credentials.validate()

    all_params = merge_params(protocol_params, request_params)
    base_string = build_signature_base(method, url, all_params)
    signing_key = build_signing_key(credentials.consumer_secret)
    signature = hmac_sha1_signature(base_string, signing_key)

    logger.debug(
        "Signed OAuth request: method=%s url=%s params=%s",
        method.upper(), url, ",".join(sorted(all_params)),
    )
    return SignedRequest({**all_params, OAUTH_SIGNATURE_PARAM: signature}, signature)


def build_signed_url(url: str, all_params: Mapping[str, str]) -> str:
    """Serialize signed parameters onto the endpoint as a query string."""
    return f"{url}?{urlencode(all_params)}"
