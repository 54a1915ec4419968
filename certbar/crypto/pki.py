"""
X.509 parsing and chain-of-trust verification.
Provides verify_chain(hostname, root, intermediates, leaf) and check_certificate().
"""
import datetime
import logging
from typing import Iterable, List, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from certbar.common.errors import CertificateParseError
from certbar.common.log import get_logger
from certbar.common.protocol import VerificationResult, VerificationStatus
from certbar.common.utils import as_utc

log = get_logger(__name__)

PEM_MARKER = b"-----BEGIN"


def load_certificate(data: Union[bytes, str]) -> x509.Certificate:
    """Load a certificate from DER or PEM bytes (or a PEM string)."""
    if isinstance(data, str):
        data = data.encode()
    try:
        if data.lstrip().startswith(PEM_MARKER):
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise CertificateParseError(f"BAD CERT: cannot parse certificate ({e})") from e


def load_certificates(data: Union[bytes, str]) -> List[x509.Certificate]:
    """Load a PEM bundle or a single DER certificate; empty input gives []."""
    if isinstance(data, str):
        data = data.encode()
    data = bytes(data)
    if not data.strip():
        return []
    if data.lstrip().startswith(PEM_MARKER):
        try:
            return x509.load_pem_x509_certificates(data)
        except ValueError as e:
            raise CertificateParseError(f"BAD CERT: cannot parse certificate bundle ({e})") from e
    return [load_certificate(data)]


def get_cn(cert: x509.Certificate) -> Optional[str]:
    attrs = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return attrs[0].value if attrs else None


def get_dns_names(cert: x509.Certificate) -> List[str]:
    """Return the SAN DNS names, or [] when the extension is absent."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return san.value.get_values_for_type(x509.DNSName)


def get_cert_fingerprint(cert: x509.Certificate) -> str:
    """Return SHA-256 fingerprint of certificate as hex string."""
    return cert.fingerprint(hashes.SHA256()).hex()


def verify_chain(
    hostname: str,
    root_ca_bytes: bytes,
    intermediate_ca_bytes: Union[Iterable[bytes], bytes, str],
    leaf_bytes: bytes,
    moment: Optional[datetime.datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> VerificationResult:
    """
    Verify leaf_bytes against a single trusted root and any intermediates.

    hostname is bound as the expected DNS name; validity periods and every
    signature along the chain are checked by cryptography's server verifier.
    An empty hostname skips name matching (client verifier profile).
    intermediate_ca_bytes is a list of certificates, or one PEM bundle or
    DER certificate given as a single value.
    moment defaults to the current time.

    Never raises for bad input: unparsable certificates give PARSE_ERROR,
    anything the verifier rejects gives UNTRUSTED.
    """
    logger = logger or log

    try:
        root = load_certificate(root_ca_bytes)
        if isinstance(intermediate_ca_bytes, (bytes, bytearray, str)):
            intermediates = load_certificates(intermediate_ca_bytes)
        else:
            intermediates = [load_certificate(b) for b in intermediate_ca_bytes]
        leaf = load_certificate(leaf_bytes)
    except CertificateParseError as e:
        logger.warning("Could not parse certificate: %s", e)
        return VerificationResult(status=VerificationStatus.PARSE_ERROR, reason=str(e))

    subject = get_cn(leaf)
    builder = PolicyBuilder().store(Store([root]))
    if moment is not None:
        builder = builder.time(as_utc(moment))

    try:
        if hostname:
            verifier = builder.build_server_verifier(x509.DNSName(hostname))
            chain = verifier.verify(leaf, intermediates)
        else:
            # no name binding; the client profile requires clientAuth when EKU is present
            chain = builder.build_client_verifier().verify(leaf, intermediates).chain
    except (VerificationError, ValueError) as e:
        logger.warning("Could not verify certificate: %s", subject)
        logger.warning("%s", e)
        return VerificationResult(
            status=VerificationStatus.UNTRUSTED, reason=f"BAD CERT: {e}", subject=subject
        )

    logger.info(
        "Certificates verify: OK (%s, chain length %d, leaf %s)",
        hostname, len(chain), get_cert_fingerprint(leaf),
    )
    return VerificationResult(status=VerificationStatus.OK, reason="OK", subject=subject)


def check_certificate(
    hostname: str,
    root_ca_bytes: bytes,
    intermediate_ca_bytes: Union[Iterable[bytes], bytes, str],
    leaf_bytes: bytes,
    moment: Optional[datetime.datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Boolean form of verify_chain(): True only when the chain verifies."""
    return verify_chain(
        hostname, root_ca_bytes, intermediate_ca_bytes, leaf_bytes, moment=moment, logger=logger
    ).ok
