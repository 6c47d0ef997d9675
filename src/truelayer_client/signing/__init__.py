"""Request signing for mutating API calls.

:var __all__: List of public exports from this module
:type __all__: List[str]
"""

from .keys import SigningKey
from .signer import (
    SIGNATURE_HEADER,
    RequestSigner,
    SigningContext,
    build_signing_payload,
    requires_signature,
    sign,
    verify_signature,
)

__all__ = [
    "SigningKey",
    "SigningContext",
    "RequestSigner",
    "SIGNATURE_HEADER",
    "build_signing_payload",
    "requires_signature",
    "sign",
    "verify_signature",
]
