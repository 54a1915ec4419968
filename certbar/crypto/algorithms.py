"""
Signature algorithm selection per key family.

An algorithm belongs to exactly one family: SHA256_WITH_RSA is never valid
for an EC key and ECDSA_WITH_SHA256 is never valid for an RSA key.
"""
import logging
from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives import hashes

from certbar.common import config
from certbar.common.errors import UnknownTokenError, UnsupportedKeyError
from certbar.common.log import get_logger
from certbar.crypto.keys import KeyKind, wrap_key

log = get_logger(__name__)

DEFAULT_HASH = "SHA256"

_HASHES = {
    "SHA1": hashes.SHA1,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
}


class SignatureAlgorithm(Enum):
    SHA1_WITH_RSA = (KeyKind.RSA, "SHA1")
    SHA256_WITH_RSA = (KeyKind.RSA, "SHA256")
    SHA384_WITH_RSA = (KeyKind.RSA, "SHA384")
    SHA512_WITH_RSA = (KeyKind.RSA, "SHA512")
    ECDSA_WITH_SHA1 = (KeyKind.ECDSA, "SHA1")
    ECDSA_WITH_SHA256 = (KeyKind.ECDSA, "SHA256")
    ECDSA_WITH_SHA384 = (KeyKind.ECDSA, "SHA384")
    ECDSA_WITH_SHA512 = (KeyKind.ECDSA, "SHA512")

    @property
    def key_kind(self) -> KeyKind:
        return self.value[0]

    @property
    def hash_name(self) -> str:
        return self.value[1]

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        return _HASHES[self.hash_name]()


def select_algorithm(
    hash_token: str,
    key_kind: KeyKind,
    strict: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
) -> SignatureAlgorithm:
    """
    Pick the signature algorithm of key_kind's family for hash_token.

    Empty or unrecognized tokens fall back to the family's SHA-256 variant.
    Raises UnsupportedKeyError when key_kind is not RSA or ECDSA.
    """
    logger = logger or log
    strict = config.STRICT_TOKENS if strict is None else strict

    try:
        kind = KeyKind(key_kind)
    except ValueError:
        raise UnsupportedKeyError(f"No signature algorithm for key kind {key_kind!r}") from None

    if hash_token not in _HASHES:
        if hash_token and strict:
            raise UnknownTokenError(f"Unknown signature hash: {hash_token!r}")
        if hash_token:
            logger.warning("Unknown signature hash %r, using %s", hash_token, DEFAULT_HASH)
        hash_token = DEFAULT_HASH

    return SignatureAlgorithm((kind, hash_token))


def algorithm_for_key(
    hash_token: str,
    private_key,
    strict: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
) -> SignatureAlgorithm:
    """select_algorithm() with the kind taken from a private key."""
    return select_algorithm(hash_token, wrap_key(private_key).kind, strict=strict, logger=logger)
