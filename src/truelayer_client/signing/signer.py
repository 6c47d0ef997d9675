"""Detached request signatures for mutating API calls.

A signature is a JWS (ES512) over a canonical rendering of the request::

    POST /v3/payments?x=1
    Idempotency-Key: 5b0a...
    {"amount_in_minor":100,...}

that is, the method and path (with query string), one ``Name: value``
line per signed header, then the exact body bytes. The payload segment is
left out of the transmitted value (``<header>..<signature>``); the server
rebuilds it from the request it receives.

The header set covered by the signature is ``Idempotency-Key`` only,
which matches the version 2 scheme understood by the API.
"""

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import httpx
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import ECAlgorithm
from jwt.utils import base64url_decode, base64url_encode

from ..utils.http.retry import IDEMPOTENCY_KEY_HEADER, MUTATING_METHODS
from .keys import SigningKey

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Tl-Signature"
SIGNED_HEADERS: Tuple[str, ...] = (IDEMPOTENCY_KEY_HEADER,)

JWS_ALGORITHM = "ES512"
SIGNATURE_VERSION = "2"

_es512 = ECAlgorithm(ECAlgorithm.SHA512)


@dataclass(frozen=True)
class SigningContext:
    """Everything a signature covers, captured from one outgoing request.

    :param method: HTTP method
    :param path: Request path including the query string, as transmitted
    :param body: Exact body bytes that will be transmitted
    :param headers: Signed headers as ``(name, value)`` pairs, in signing order
    """

    method: str
    path: str
    body: bytes = b""
    headers: Tuple[Tuple[str, str], ...] = ()

    @property
    def idempotency_key(self) -> Optional[str]:
        for name, value in self.headers:
            if name.lower() == IDEMPOTENCY_KEY_HEADER.lower():
                return value
        return None

    @classmethod
    def from_request(
        cls, request: httpx.Request, header_names: Iterable[str] = SIGNED_HEADERS
    ) -> "SigningContext":
        """Capture the signed parts of ``request``.

        The request body must already be loaded (``await request.aread()``).

        :param request: Fully built outgoing request
        :param header_names: Headers to include when present on the request
        :return: Signing context
        :rtype: SigningContext
        """
        headers = tuple(
            (name, request.headers[name])
            for name in header_names
            if name in request.headers
        )
        return cls(
            method=request.method,
            path=request.url.raw_path.decode("ascii"),
            body=request.content,
            headers=headers,
        )


def requires_signature(method: str) -> bool:
    """Return whether requests with ``method`` must be signed."""
    return method.upper() in MUTATING_METHODS


def build_signing_payload(context: SigningContext) -> bytes:
    """Render the canonical bytes covered by a signature.

    :param context: Request parts to sign
    :return: Canonical payload
    :rtype: bytes
    """
    lines = [f"{context.method.upper()} {context.path}\n".encode("utf-8")]
    for name, value in context.headers:
        lines.append(f"{name}: {value}\n".encode("utf-8"))
    lines.append(context.body)
    return b"".join(lines)


def _jws_header(key_id: str, header_names: Iterable[str]) -> bytes:
    header = {
        "alg": JWS_ALGORITHM,
        "kid": key_id,
        "tl_version": SIGNATURE_VERSION,
        "tl_headers": ",".join(header_names),
    }
    return json.dumps(header, separators=(",", ":")).encode("utf-8")


def sign(context: SigningContext, key: SigningKey) -> str:
    """Produce the detached signature header value for ``context``.

    :param context: Request parts to sign
    :param key: Signing key
    :return: ``<protected header>..<signature>``
    :rtype: str
    :raises SigningError: If the key material is unusable
    """
    private_key = key.private_key()
    header_segment = base64url_encode(
        _jws_header(key.key_id, (name for name, _ in context.headers))
    )
    signing_input = (
        header_segment + b"." + base64url_encode(build_signing_payload(context))
    )
    signature = _es512.sign(signing_input, private_key)
    logger.debug(
        f"Signed {context.method} {context.path} with key '{key.key_id}' "
        f"({len(context.body)} body bytes)"
    )
    return (header_segment + b".." + base64url_encode(signature)).decode("ascii")


def verify_signature(
    signature: str,
    context: SigningContext,
    public_key: ec.EllipticCurvePublicKey,
    key_id: Optional[str] = None,
) -> bool:
    """Check a detached signature against a request.

    The signed header list is read from the protected header, and the
    values are taken from ``context``.

    :param signature: Value of the signature header
    :param context: Request parts as received
    :param public_key: Public key matching the signing key
    :param key_id: Expected ``kid``, if it should be checked
    :return: True if the signature is valid for ``context``
    :rtype: bool
    """
    parts = signature.split(".")
    if len(parts) != 3 or parts[1]:
        return False
    header_segment, _, signature_segment = (p.encode("ascii") for p in parts)

    try:
        header = json.loads(base64url_decode(header_segment))
        raw_signature = base64url_decode(signature_segment)
    except ValueError:
        return False

    if not isinstance(header, dict) or header.get("alg") != JWS_ALGORITHM:
        return False
    if key_id is not None and header.get("kid") != key_id:
        return False

    names = [n for n in str(header.get("tl_headers", "")).split(",") if n]
    received = {name.lower(): value for name, value in context.headers}
    if any(name.lower() not in received for name in names):
        return False
    signed_context = SigningContext(
        method=context.method,
        path=context.path,
        body=context.body,
        headers=tuple((name, received[name.lower()]) for name in names),
    )

    signing_input = (
        header_segment + b"." + base64url_encode(build_signing_payload(signed_context))
    )
    return _es512.verify(signing_input, public_key, raw_signature)


class RequestSigner:
    """Sign outgoing requests with one key.

    :param key: Signing key owned by the client
    :type key: SigningKey
    """

    def __init__(self, key: SigningKey):
        self.key = key

    @property
    def key_id(self) -> str:
        return self.key.key_id

    def sign(self, context: SigningContext) -> str:
        """Return the signature header value for ``context``."""
        return sign(context, self.key)

    def sign_request(self, request: httpx.Request) -> str:
        """Sign ``request`` in place and return the signature.

        :param request: Request whose body has already been read
        :return: Signature header value
        :raises SigningError: If the key is unusable
        :raises ValueError: If the method is read-only
        """
        if not requires_signature(request.method):
            raise ValueError(f"{request.method} requests are not signed")
        signature = self.sign(SigningContext.from_request(request))
        request.headers[SIGNATURE_HEADER] = signature
        return signature
