import hashlib
import re
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.x509.oid import NameOID

from tlsdoctor.util import (
    BOLD_BLUE,
    RESET,
    ec_curve_name,
    fingerprint_sha256,
    format_name_human,
    infer_cert_type,
    issuer_cn,
    name_items,
    subject_cn,
)


def gen_key():
    return ec.generate_private_key(ec.SECP256R1())


def build_name(cn, org=None, serial_attr=None):
    attrs = [x509.NameAttribute(NameOID.COMMON_NAME, cn)]
    if org is not None:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, org))
    if serial_attr is not None:
        attrs.append(x509.NameAttribute(NameOID.SERIAL_NUMBER, serial_attr))
    return x509.Name(attrs)


def build_cert(subject_cn_, org, serial_attr, issuer_cert, issuer_key, subject_key):
    subject = build_name(subject_cn_, org, serial_attr)
    issuer = issuer_cert.subject if issuer_cert is not None else subject
    sign_key = issuer_key if issuer_cert is not None else subject_key
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=365))
        .sign(sign_key, hashes.SHA256())
    )


def test_cn_extract_and_type():
    k = gen_key()
    ca = build_cert("CA", "Org", None, None, k, k)
    leaf_dv = build_cert("LeafDV", None, None, ca, k, k)
    leaf_ov = build_cert("LeafOV", "Org", None, ca, k, k)
    leaf_ev = build_cert("LeafEV", "Org", "SN123", ca, k, k)

    assert subject_cn(leaf_dv) == "LeafDV"
    assert issuer_cn(leaf_dv) == "CA"

    assert infer_cert_type(leaf_dv) == "Domain Validation"
    assert infer_cert_type(leaf_ov) == "Organization Validation"
    assert infer_cert_type(leaf_ev) == "Extended Validation"


def test_cn_missing_returns_none():
    k = gen_key()
    name = x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Org")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(k.public_key())
        .serial_number(1)
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=1))
        .sign(k, hashes.SHA256())
    )
    assert subject_cn(cert) is None
    assert issuer_cn(cert) is None


def test_name_items_orders_and_filters():
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.LOCALITY_NAME, "Springfield"),
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
            x509.NameAttribute(NameOID.EMAIL_ADDRESS, "admin@example.com"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, "example.com"),
            x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, "State"),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "Unit"),
        ]
    )
    assert name_items(name) == [
        ("Common Name", "example.com"),
        ("Organization", "Org"),
        ("Organizational Unit", "Unit"),
        ("Country", "US"),
        ("State/Province", "State"),
        ("Locality", "Springfield"),
    ]


def test_name_items_keeps_repeated_attributes_in_order():
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "B"),
            x509.NameAttribute(NameOID.COMMON_NAME, "host"),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "A"),
        ]
    )
    assert name_items(name) == [
        ("Common Name", "host"),
        ("Organizational Unit", "B"),
        ("Organizational Unit", "A"),
    ]


def test_format_name_human():
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, "Leaf"),
        ]
    )
    expected = (
        f"{BOLD_BLUE}Common Name{RESET}=Leaf, {BOLD_BLUE}Organization{RESET}=Org"
    )
    assert format_name_human(name) == expected


def test_format_name_human_empty_when_nothing_displayable():
    name = x509.Name(
        [x509.NameAttribute(NameOID.EMAIL_ADDRESS, "admin@example.com")]
    )
    assert format_name_human(name) == ""


def test_fingerprint_sha256_format_and_value():
    k = gen_key()
    cert = build_cert("Leaf", None, None, None, k, k)
    fp = fingerprint_sha256(cert)
    assert re.fullmatch(r"([0-9A-F]{2}:){31}[0-9A-F]{2}", fp)
    digest = hashlib.sha256(cert.public_bytes(serialization.Encoding.DER)).digest()
    assert bytes.fromhex(fp.replace(":", "")) == digest


@pytest.mark.parametrize(
    "curve, expected",
    [
        (ec.SECP256R1(), "prime256v1"),
        (ec.SECP384R1(), "secp384r1"),
        (ec.SECP521R1(), "secp521r1"),
    ],
)
def test_ec_curve_name(curve, expected):
    key = ec.generate_private_key(curve)
    assert ec_curve_name(key.public_key()) == expected


def test_ec_curve_name_non_ec_key():
    key = ed25519.Ed25519PrivateKey.generate()
    assert ec_curve_name(key.public_key()) is None