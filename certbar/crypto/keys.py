"""
Key handles for the two supported key families, and subject key identifiers.

RSAKey and ECDSAKey wrap a private key from `cryptography` and expose only
what issuance needs: the key kind, the public key and the canonical bytes of
the public key. wrap_key() is the single place that inspects key types.
"""
from enum import Enum
from typing import Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from certbar.common.errors import UnsupportedKeyError
from certbar.common.utils import sha1_digest


class KeyKind(str, Enum):
    RSA = "RSA"
    ECDSA = "ECDSA"


class KeyHandle:
    """Base for the supported key families."""

    kind: KeyKind

    def __init__(self, private_key):
        self.private_key = private_key

    def public_key(self):
        return self.private_key.public_key()

    def public_key_bits(self) -> bytes:
        return public_key_bits(self.public_key())

    def __repr__(self):
        return f"{type(self).__name__}()"


class RSAKey(KeyHandle):
    kind = KeyKind.RSA


class ECDSAKey(KeyHandle):
    kind = KeyKind.ECDSA


def wrap_key(private_key) -> KeyHandle:
    """Return the key handle for an RSA or EC private key."""
    if isinstance(private_key, KeyHandle):
        return private_key
    if isinstance(private_key, rsa.RSAPrivateKey):
        return RSAKey(private_key)
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return ECDSAKey(private_key)
    raise UnsupportedKeyError(f"Unsupported private key type: {type(private_key).__name__}")


def unwrap_key(key: Union[KeyHandle, object]):
    """Return the raw `cryptography` private key behind a handle."""
    return key.private_key if isinstance(key, KeyHandle) else key


def public_key_bits(public_key) -> bytes:
    """
    Bytes carried in the subjectPublicKey BIT STRING:
      RSA -> PKCS#1 RSAPublicKey DER
      EC  -> X9.62 uncompressed point
    """
    if isinstance(public_key, rsa.RSAPublicKey):
        return public_key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.PKCS1,
        )
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return public_key.public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.UncompressedPoint,
        )
    raise UnsupportedKeyError(f"Unsupported public key type: {type(public_key).__name__}")


def derive_key_identifier(public_key) -> bytes:
    """Return SHA-1 (20 bytes) of the public key bits; used for SKI/AKI chaining."""
    return sha1_digest(public_key_bits(public_key))
