"""
Key usage / extended key usage policy.

resolve_usage(tokens, is_ca) turns human-readable usage tokens into the key
usage bit set and the extended key usage list placed on a certificate.
"""
import logging
from enum import IntFlag
from typing import Iterable, List, Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, ObjectIdentifier

from certbar.common import config
from certbar.common.errors import UnknownTokenError
from certbar.common.log import get_logger

log = get_logger(__name__)


class KeyUsage(IntFlag):
    DIGITAL_SIGNATURE = 1 << 0
    CONTENT_COMMITMENT = 1 << 1
    KEY_ENCIPHERMENT = 1 << 2
    DATA_ENCIPHERMENT = 1 << 3
    KEY_AGREEMENT = 1 << 4
    CERT_SIGN = 1 << 5
    CRL_SIGN = 1 << 6
    ENCIPHER_ONLY = 1 << 7
    DECIPHER_ONLY = 1 << 8


KEY_USAGE_TOKENS = {
    "crlsign": KeyUsage.CRL_SIGN,
    "certsign": KeyUsage.CERT_SIGN,
    "encipherment": KeyUsage.KEY_ENCIPHERMENT,
    "signature": KeyUsage.DIGITAL_SIGNATURE,
    "contentcommitment": KeyUsage.CONTENT_COMMITMENT,
}

EXT_KEY_USAGE_TOKENS = {
    "clientauth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "serverauth": ExtendedKeyUsageOID.SERVER_AUTH,
}


def default_key_usage(is_ca: bool) -> KeyUsage:
    if is_ca:
        return KeyUsage.CERT_SIGN | KeyUsage.CRL_SIGN
    return KeyUsage.KEY_ENCIPHERMENT | KeyUsage.DIGITAL_SIGNATURE


def default_ext_key_usage(is_ca: bool) -> List[ObjectIdentifier]:
    if is_ca:
        return []
    return [ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.SERVER_AUTH]


def resolve_usage(
    tokens: Iterable[str],
    is_ca: bool,
    strict: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[KeyUsage, List[ObjectIdentifier]]:
    """
    Resolve usage tokens.

    No tokens: CA gets CertSign|CRLSign and no extended usage, anything else
    gets KeyEncipherment|DigitalSignature with ClientAuth, ServerAuth.

    Otherwise each recognized token ORs in a bit or appends an extended usage
    in token order. Unrecognized tokens are logged and dropped, or raise
    UnknownTokenError when strict.
    """
    logger = logger or log
    strict = config.STRICT_TOKENS if strict is None else strict
    tokens = list(tokens)

    if not tokens:
        return default_key_usage(is_ca), default_ext_key_usage(is_ca)

    key_usage = KeyUsage(0)
    ext_key_usage: List[ObjectIdentifier] = []
    for token in tokens:
        if token in KEY_USAGE_TOKENS:
            key_usage |= KEY_USAGE_TOKENS[token]
        elif token in EXT_KEY_USAGE_TOKENS:
            ext_key_usage.append(EXT_KEY_USAGE_TOKENS[token])
        elif strict:
            raise UnknownTokenError(f"Unknown usage token: {token!r}")
        else:
            logger.warning("Ignoring unknown usage token %r", token)
    return key_usage, ext_key_usage


def to_x509_key_usage(key_usage: KeyUsage) -> x509.KeyUsage:
    """Map the bit set onto the cryptography KeyUsage extension value."""
    return x509.KeyUsage(
        digital_signature=bool(key_usage & KeyUsage.DIGITAL_SIGNATURE),
        content_commitment=bool(key_usage & KeyUsage.CONTENT_COMMITMENT),
        key_encipherment=bool(key_usage & KeyUsage.KEY_ENCIPHERMENT),
        data_encipherment=bool(key_usage & KeyUsage.DATA_ENCIPHERMENT),
        key_agreement=bool(key_usage & KeyUsage.KEY_AGREEMENT),
        key_cert_sign=bool(key_usage & KeyUsage.CERT_SIGN),
        crl_sign=bool(key_usage & KeyUsage.CRL_SIGN),
        encipher_only=bool(key_usage & KeyUsage.ENCIPHER_ONLY),
        decipher_only=bool(key_usage & KeyUsage.DECIPHER_ONLY),
    )
