"""Shared keys, descriptors and a small root -> intermediate -> leaf hierarchy."""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from certbar.common.protocol import CertificateDescriptor
from certbar.crypto.sign import issue_certificate

NOW = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
VALID_FROM = NOW - datetime.timedelta(days=1)
VALID_TO = NOW + datetime.timedelta(days=30)


@pytest.fixture(scope="session")
def now():
    return NOW


@pytest.fixture(scope="session")
def validity():
    """(valid_from, valid_to) used by every descriptor unless overridden."""
    return VALID_FROM, VALID_TO


def _rsa():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _ec():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def rsa_key():
    return _rsa()


@pytest.fixture(scope="session")
def ec_key():
    return _ec()


@pytest.fixture(scope="session")
def keys():
    """Independent keys for each level of the test hierarchy."""
    return {
        "root": _rsa(),
        "intermediate": _rsa(),
        "leaf": _rsa(),
        "ec_root": _ec(),
        "ec_leaf": _ec(),
    }


def descriptor(**overrides) -> CertificateDescriptor:
    fields = dict(
        id="leaf-1",
        country="SE",
        organization="certbar",
        organizational_unit="test",
        common_name="example.com",
        alternative_names=[],
        usage=[],
        is_ca=False,
        signature_hash_algorithm="SHA256",
        valid_from=VALID_FROM,
        valid_to=VALID_TO,
    )
    fields.update(overrides)
    return CertificateDescriptor(**fields)


@pytest.fixture
def make_descriptor(rsa_key):
    def _make(**overrides):
        overrides.setdefault("private_key", rsa_key)
        return descriptor(**overrides)
    return _make


@pytest.fixture(scope="session")
def hierarchy(keys):
    """DER bytes for an RSA root, intermediate and two leaves, plus an EC root/leaf."""
    root = issue_certificate(descriptor(
        id="root-1", common_name="certbar Root CA", is_ca=True, private_key=keys["root"],
    ))
    root_cert = x509.load_der_x509_certificate(root)

    inter = issue_certificate(descriptor(
        id="inter-1", common_name="certbar Intermediate CA", is_ca=True,
        private_key=keys["intermediate"],
    ), root_cert, keys["root"])
    inter_cert = x509.load_der_x509_certificate(inter)

    leaf = issue_certificate(descriptor(
        id="leaf-1", common_name="example.com", alternative_names=["example.com"],
        private_key=keys["leaf"],
    ), root_cert, keys["root"])

    inter_leaf = issue_certificate(descriptor(
        id="leaf-2", common_name="www.example.com", alternative_names=["api.example.com"],
        private_key=keys["leaf"],
    ), inter_cert, keys["intermediate"])

    ec_root = issue_certificate(descriptor(
        id="ec-root", common_name="certbar EC Root", is_ca=True, private_key=keys["ec_root"],
    ))
    ec_leaf = issue_certificate(descriptor(
        id="ec-leaf", common_name="ec.example.com", alternative_names=["ec.example.com"],
        private_key=keys["ec_leaf"],
    ), x509.load_der_x509_certificate(ec_root), keys["ec_root"])

    return {
        "root": root,
        "intermediate": inter,
        "leaf": leaf,
        "inter_leaf": inter_leaf,
        "ec_root": ec_root,
        "ec_leaf": ec_leaf,
    }
