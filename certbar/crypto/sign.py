"""
Sign certificate templates with cryptography's CertificateBuilder.

sign_certificate(template, issuer, subject_public_key, issuer_private_key)
returns DER bytes. Pass the template itself as issuer to self-sign.
"""
import logging
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from certbar.common.errors import CertbarError, SigningError
from certbar.common.log import get_logger
from certbar.common.protocol import CertificateDescriptor
from certbar.crypto.keys import derive_key_identifier, unwrap_key, wrap_key
from certbar.crypto.template import CertificateTemplate, build_template
from certbar.crypto.usage import to_x509_key_usage

log = get_logger(__name__)

Issuer = Union[x509.Certificate, CertificateTemplate]


def _issuer_name(issuer: Issuer) -> x509.Name:
    if isinstance(issuer, CertificateTemplate):
        return issuer.subject.to_x509()
    return issuer.subject


def _issuer_key_id(issuer: Issuer) -> Optional[bytes]:
    if isinstance(issuer, CertificateTemplate):
        return issuer.subject_key_id
    try:
        ski = issuer.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
    except x509.ExtensionNotFound:
        return None
    return ski.value.digest


def _build(template: CertificateTemplate, issuer: Issuer, subject_public_key) -> x509.CertificateBuilder:
    subject = template.subject.to_x509()
    issuer_name = _issuer_name(issuer)

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name)
        .public_key(subject_public_key)
        .serial_number(template.serial_number)
        .not_valid_before(template.not_before)
        .not_valid_after(template.not_after)
    )
    if template.basic_constraints_valid:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=template.is_ca, path_length=None), critical=True
        )
    if template.key_usage:
        builder = builder.add_extension(to_x509_key_usage(template.key_usage), critical=True)
    if template.ext_key_usage:
        builder = builder.add_extension(
            x509.ExtendedKeyUsage(list(template.ext_key_usage)), critical=False
        )
    builder = builder.add_extension(x509.SubjectKeyIdentifier(template.subject_key_id), critical=False)

    # self-issued certificates carry no authority key identifier
    authority_key_id = _issuer_key_id(issuer)
    if authority_key_id and issuer_name != subject:
        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier(authority_key_id, None, None), critical=False
        )

    if template.dns_names:
        # critical when the subject is empty
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(n) for n in template.dns_names]),
            critical=len(subject) == 0,
        )
    return builder


def sign_certificate(
    template: CertificateTemplate,
    issuer: Issuer,
    subject_public_key,
    issuer_private_key,
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """
    Sign template with issuer_private_key and return the DER certificate.

    Raises SigningError for any failure: an issuer key from the wrong family
    for the template's signature algorithm, an out-of-range serial number, an
    inverted validity window or an error inside the library.
    """
    logger = logger or log
    try:
        signer = wrap_key(issuer_private_key)
        algorithm = template.signature_algorithm
        if algorithm.key_kind != signer.kind:
            raise SigningError(
                f"Signature algorithm {algorithm.name} does not match {signer.kind.value} issuer key"
            )
        if isinstance(issuer, CertificateTemplate):
            issuer_key_id = derive_key_identifier(issuer.public_key)
        else:
            issuer_key_id = derive_key_identifier(issuer.public_key())
        if issuer_key_id != derive_key_identifier(signer.public_key()):
            raise SigningError("Issuer private key does not match the issuer's public key")
        builder = _build(template, issuer, subject_public_key)
        cert = builder.sign(private_key=unwrap_key(signer), algorithm=algorithm.hash_algorithm())
    except SigningError as e:
        logger.error("Failed to sign certificate serial=%x: %s", template.serial_number, e)
        raise
    except (CertbarError, ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.error("Failed to sign certificate serial=%x: %s", template.serial_number, e)
        raise SigningError(f"Failed to sign certificate: {e}") from e

    logger.info(
        "Signed certificate serial=%x subject=%s",
        template.serial_number, cert.subject.rfc4514_string(),
    )
    return cert.public_bytes(serialization.Encoding.DER)


def issue_certificate(
    descriptor: CertificateDescriptor,
    issuer_cert: Optional[x509.Certificate] = None,
    issuer_key=None,
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """
    Build and sign in one step. Without issuer_cert the certificate is
    self-signed with the descriptor's own key.
    """
    template = build_template(descriptor, logger=logger)
    if issuer_cert is None:
        return sign_certificate(
            template, template, template.public_key, descriptor.private_key, logger=logger
        )
    if issuer_key is None:
        raise SigningError("issuer_key is required when issuer_cert is given")
    return sign_certificate(template, issuer_cert, template.public_key, issuer_key, logger=logger)
