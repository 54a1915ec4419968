"""
Certificate template construction.

build_template(descriptor) resolves every default (serial, key identifier,
usage, signature algorithm, SAN list) and returns an immutable template that
sign_certificate() turns into DER bytes.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from certbar.common.log import get_logger
from certbar.common.protocol import CertificateDescriptor
from certbar.common.utils import as_utc, serial_from_id
from certbar.crypto.algorithms import SignatureAlgorithm, select_algorithm
from certbar.crypto.keys import derive_key_identifier, wrap_key
from certbar.crypto.usage import KeyUsage, resolve_usage

log = get_logger(__name__)


@dataclass(frozen=True)
class SubjectName:
    country: str = ""
    organization: str = ""
    organizational_unit: str = ""
    common_name: Optional[str] = None

    def to_x509(self) -> x509.Name:
        """Empty attributes are left out of the encoded name."""
        attrs = [
            (NameOID.COUNTRY_NAME, self.country),
            (NameOID.ORGANIZATION_NAME, self.organization),
            (NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
            (NameOID.COMMON_NAME, self.common_name),
        ]
        return x509.Name([x509.NameAttribute(oid, value) for oid, value in attrs if value])


@dataclass(frozen=True)
class CertificateTemplate:
    serial_number: int
    subject: SubjectName
    not_before: datetime.datetime
    not_after: datetime.datetime
    subject_key_id: bytes
    is_ca: bool
    key_usage: KeyUsage
    ext_key_usage: Tuple[ObjectIdentifier, ...]
    dns_names: Optional[Tuple[str, ...]]
    signature_algorithm: SignatureAlgorithm
    public_key: Any
    basic_constraints_valid: bool = True


def subject_alt_names(common_name: str, alternative_names: List[str]) -> Optional[Tuple[str, ...]]:
    """
    Verifiers ignore the CN once a SAN extension exists, so a non-empty CN
    is repeated in the SAN list. Without alternative names no list is set.
    """
    if not alternative_names:
        return None
    names = list(alternative_names)
    if common_name and common_name not in names:
        names.append(common_name)
    return tuple(names)


def build_template(
    descriptor: CertificateDescriptor,
    logger: Optional[logging.Logger] = None,
) -> CertificateTemplate:
    logger = logger or log
    key = wrap_key(descriptor.private_key)
    public_key = key.public_key()

    key_usage, ext_key_usage = resolve_usage(descriptor.usage, descriptor.is_ca, logger=logger)

    template = CertificateTemplate(
        serial_number=serial_from_id(descriptor.id),
        subject=SubjectName(
            country=descriptor.country,
            organization=descriptor.organization,
            organizational_unit=descriptor.organizational_unit,
            common_name=descriptor.common_name or None,
        ),
        not_before=as_utc(descriptor.valid_from),
        not_after=as_utc(descriptor.valid_to),
        subject_key_id=derive_key_identifier(public_key),
        is_ca=descriptor.is_ca,
        key_usage=key_usage,
        ext_key_usage=tuple(ext_key_usage),
        dns_names=subject_alt_names(descriptor.common_name, descriptor.alternative_names),
        signature_algorithm=select_algorithm(
            descriptor.signature_hash_algorithm, key.kind, logger=logger
        ),
        public_key=public_key,
    )
    logger.debug(
        "Built template serial=%x ca=%s alg=%s",
        template.serial_number, template.is_ca, template.signature_algorithm.name,
    )
    return template
