"""Helpers for reading and displaying X.509 certificate names and fingerprints."""

from __future__ import annotations

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

BOLD = "\x1b[1m"
BOLD_BLUE = "\x1b[1;34m"
BLUE = "\x1b[34m"
RESET = "\x1b[0m"

# Display order and human labels of the name attributes that are shown.
_LABELS: dict[x509.ObjectIdentifier, str] = {
    NameOID.COMMON_NAME: "Common Name",
    NameOID.ORGANIZATION_NAME: "Organization",
    NameOID.ORGANIZATIONAL_UNIT_NAME: "Organizational Unit",
    NameOID.COUNTRY_NAME: "Country",
    NameOID.STATE_OR_PROVINCE_NAME: "State/Province",
    NameOID.LOCALITY_NAME: "Locality",
}

# Curve names as OpenSSL reports them where they differ from the SEC names.
_CURVE_SHORT_NAMES = {
    "secp192r1": "prime192v1",
    "secp256r1": "prime256v1",
}


def _text_value(attribute: x509.NameAttribute) -> str | None:
    value = attribute.value
    return value if isinstance(value, str) else None


def name_items(name: x509.Name) -> list[tuple[str, str]]:
    """Return the displayed attributes of a name as (label, value) pairs in a fixed order."""
    parts = [
        (attr.oid, text)
        for attr in name
        if attr.oid in _LABELS and (text := _text_value(attr)) is not None
    ]
    return [
        (label, value)
        for oid, label in _LABELS.items()
        for part_oid, value in parts
        if part_oid == oid
    ]


def format_name_human(name: x509.Name) -> str:
    """Render a name as a compact, single-line, coloured list of attributes."""
    return ", ".join(
        f"{BOLD_BLUE}{label}{RESET}={value}" for label, value in name_items(name)
    )


def fingerprint_sha256(cert: x509.Certificate) -> str:
    """Return the SHA-256 fingerprint as colon-separated uppercase hex."""
    return ":".join(f"{byte:02X}" for byte in cert.fingerprint(hashes.SHA256()))


def ec_curve_name(public_key: object) -> str | None:
    """Return the named curve of an EC public key, or None for other key types."""
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        return None
    name = public_key.curve.name
    return _CURVE_SHORT_NAMES.get(name, name)


def infer_cert_type(cert: x509.Certificate) -> str:
    """Classify a certificate as DV, OV or EV from its subject attributes."""
    oids = {attr.oid for attr in cert.subject}
    has_org = NameOID.ORGANIZATION_NAME in oids
    has_serial = NameOID.SERIAL_NUMBER in oids
    if has_org and has_serial:
        return "Extended Validation"
    if has_org:
        return "Organization Validation"
    return "Domain Validation"


def _common_name(name: x509.Name) -> str | None:
    for attr in name.get_attributes_for_oid(NameOID.COMMON_NAME):
        text = _text_value(attr)
        if text is not None:
            return text
    return None


def subject_cn(cert: x509.Certificate) -> str | None:
    """Return the subject Common Name, if present."""
    return _common_name(cert.subject)


def issuer_cn(cert: x509.Certificate) -> str | None:
    """Return the issuer Common Name, if present."""
    return _common_name(cert.issuer)