"""Signing key storage.

Holds the key identifier and PEM encoded private key used to sign
mutating requests. The key material lives in a mutable buffer that is
zeroed by :meth:`SigningKey.clear` and when the key is garbage collected,
and it is never included in ``repr`` or pickled.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..exceptions import SigningError, SigningErrorKind

logger = logging.getLogger(__name__)

# ES512 signatures require a P-521 key
REQUIRED_CURVE = "secp521r1"


class SigningKey:
    """Key id and private key used for request signatures.

    :param key_id: Identifier of the public key uploaded to TrueLayer
    :type key_id: str
    :param private_key_pem: PEM encoded EC P-521 private key
    :type private_key_pem: Union[bytes, str]
    :raises ValueError: If the key id or key material is empty
    """

    def __init__(self, key_id: str, private_key_pem: Union[bytes, str]):
        if not key_id:
            raise ValueError("Signing key id must not be empty")
        if isinstance(private_key_pem, str):
            private_key_pem = private_key_pem.encode("utf-8")
        if not private_key_pem:
            raise ValueError("Signing key material must not be empty")
        self._key_id = key_id
        self._pem = bytearray(private_key_pem)
        self._private_key: Optional[ec.EllipticCurvePrivateKey] = None

    @classmethod
    def from_file(cls, key_id: str, path: Union[str, Path]) -> "SigningKey":
        """Load the PEM private key from ``path``.

        :param key_id: Identifier of the matching public key
        :param path: Path to the PEM file
        :return: Signing key
        :rtype: SigningKey
        """
        return cls(key_id, Path(path).expanduser().read_bytes())

    @property
    def key_id(self) -> str:
        """Return the key identifier."""
        return self._key_id

    @property
    def is_cleared(self) -> bool:
        """Return whether the key material has been wiped."""
        return not any(self._pem)

    def private_key(self) -> ec.EllipticCurvePrivateKey:
        """Return the parsed private key, loading it on first use.

        :return: EC P-521 private key
        :rtype: ec.EllipticCurvePrivateKey
        :raises SigningError: If the material is not a usable P-521 key
        """
        if self._private_key is not None:
            return self._private_key

        if self.is_cleared:
            raise SigningError(
                f"Key material for '{self._key_id}' has been cleared",
                kind=SigningErrorKind.INVALID_KEY,
            )

        try:
            key = serialization.load_pem_private_key(bytes(self._pem), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            logger.error(f"Could not load private key for key id '{self._key_id}'")
            raise SigningError(
                f"Malformed private key for key id '{self._key_id}': {e}",
                kind=SigningErrorKind.INVALID_KEY,
            ) from e

        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise SigningError(
                f"Key '{self._key_id}' is not an elliptic curve private key",
                kind=SigningErrorKind.INVALID_KEY,
            )
        if key.curve.name != REQUIRED_CURVE:
            raise SigningError(
                f"Unsupported curve '{key.curve.name}' for key '{self._key_id}', "
                f"expected {REQUIRED_CURVE}",
                kind=SigningErrorKind.INVALID_KEY,
            )

        self._private_key = key
        return key

    def public_key(self) -> ec.EllipticCurvePublicKey:
        """Return the public half of the signing key."""
        return self.private_key().public_key()

    def clear(self) -> None:
        """Zero the key material and drop the parsed key."""
        for i in range(len(self._pem)):
            self._pem[i] = 0
        self._private_key = None

    def __del__(self):
        # __init__ may have failed before the buffer existed
        if "_pem" in self.__dict__:
            self.clear()

    def __repr__(self) -> str:
        return f"SigningKey(key_id={self._key_id!r}, private_key=<redacted>)"

    def __getstate__(self):
        raise TypeError("SigningKey cannot be serialized")
