"""Chain-of-trust verification against a root and optional intermediates."""

import datetime

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from certbar.common.protocol import VerificationStatus
from certbar.crypto.pki import check_certificate, get_cert_fingerprint, get_cn, load_certificate, verify_chain


def _pem(der):
    return x509.load_der_x509_certificate(der).public_bytes(serialization.Encoding.PEM)


def test_leaf_signed_by_root(hierarchy):
    assert check_certificate("example.com", hierarchy["root"], [], hierarchy["leaf"]) is True
    result = verify_chain("example.com", hierarchy["root"], [], hierarchy["leaf"])
    assert result.status == VerificationStatus.OK
    assert result.subject == "example.com"
    assert result


def test_hostname_mismatch(hierarchy):
    assert check_certificate("other.com", hierarchy["root"], [], hierarchy["leaf"]) is False
    result = verify_chain("other.com", hierarchy["root"], [], hierarchy["leaf"])
    assert result.status == VerificationStatus.UNTRUSTED
    assert not result


def test_common_name_reachable_through_san(hierarchy):
    # leaf-2 was issued with SAN api.example.com and CN www.example.com
    for host in ("api.example.com", "www.example.com"):
        assert check_certificate(host, hierarchy["root"], [hierarchy["intermediate"]], hierarchy["inter_leaf"])


def test_intermediate_required(hierarchy):
    result = verify_chain("api.example.com", hierarchy["root"], [], hierarchy["inter_leaf"])
    assert result.status == VerificationStatus.UNTRUSTED


def test_untrusted_root(hierarchy):
    result = verify_chain("ec.example.com", hierarchy["root"], [], hierarchy["ec_leaf"])
    assert result.status == VerificationStatus.UNTRUSTED


def test_ecdsa_chain(hierarchy):
    assert check_certificate("ec.example.com", hierarchy["ec_root"], [], hierarchy["ec_leaf"])


def test_expired_at_given_moment(hierarchy, now):
    later = now + datetime.timedelta(days=60)
    result = verify_chain("example.com", hierarchy["root"], [], hierarchy["leaf"], moment=later)
    assert result.status == VerificationStatus.UNTRUSTED


def test_pem_input_accepted(hierarchy):
    assert check_certificate(
        "example.com", _pem(hierarchy["root"]), [], _pem(hierarchy["leaf"]).decode()
    )


def test_parse_error_is_distinct(hierarchy):
    result = verify_chain("example.com", b"not a certificate", [], hierarchy["leaf"])
    assert result.status == VerificationStatus.PARSE_ERROR
    assert result.subject is None
    assert check_certificate("example.com", hierarchy["root"], [b"\x30\x03junk"], hierarchy["leaf"]) is False


def test_inputs_not_mutated(hierarchy):
    intermediates = [hierarchy["intermediate"]]
    verify_chain("api.example.com", hierarchy["root"], intermediates, hierarchy["inter_leaf"])
    assert intermediates == [hierarchy["intermediate"]]


def test_certificate_helpers(hierarchy):
    cert = load_certificate(hierarchy["leaf"])
    assert get_cn(cert) == "example.com"
    assert len(get_cert_fingerprint(cert)) == 64


def test_empty_hostname_skips_name_matching(hierarchy):
    result = verify_chain("", hierarchy["root"], [], hierarchy["leaf"])
    assert result.status == VerificationStatus.OK
    assert check_certificate("", hierarchy["root"], [hierarchy["intermediate"]], hierarchy["inter_leaf"])


def test_empty_hostname_still_checks_chain(hierarchy, now):
    assert verify_chain("", hierarchy["root"], [], hierarchy["ec_leaf"]).status == VerificationStatus.UNTRUSTED
    later = now + datetime.timedelta(days=60)
    assert verify_chain("", hierarchy["root"], [], hierarchy["leaf"], moment=later).status == (
        VerificationStatus.UNTRUSTED
    )


def test_single_der_intermediate_value(hierarchy):
    assert check_certificate(
        "api.example.com", hierarchy["root"], hierarchy["intermediate"], hierarchy["inter_leaf"]
    )
    assert check_certificate("example.com", hierarchy["root"], b"", hierarchy["leaf"])


def test_pem_bundle_intermediate_value(hierarchy):
    bundle = _pem(hierarchy["intermediate"]) + _pem(hierarchy["root"])
    assert check_certificate("api.example.com", hierarchy["root"], bundle, hierarchy["inter_leaf"])


def test_single_garbage_intermediate_value(hierarchy):
    result = verify_chain("example.com", hierarchy["root"], b"\x30\x03junk", hierarchy["leaf"])
    assert result.status == VerificationStatus.PARSE_ERROR
