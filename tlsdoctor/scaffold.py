"""Assemble a leaf-to-root bundle by following AIA caIssuers links."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import requests
from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import AuthorityInformationAccessOID

USER_AGENT = "tls-doctor/1.0"
TIMEOUT_SECONDS = 15
MAX_REDIRECTS = 5


def parse_single_cert(data: bytes) -> x509.Certificate:
    """Parse the first certificate from PEM data, or a single DER certificate."""
    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError:
        certs = []
    if certs:
        return certs[0]
    try:
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise ValueError("input is neither PEM nor DER certificate") from exc


def aia_ca_issuers_urls(cert: x509.Certificate) -> list[str]:
    """Return the caIssuers URIs from the Authority Information Access extension."""
    try:
        aia = cert.extensions.get_extension_for_class(x509.AuthorityInformationAccess).value
    except (x509.ExtensionNotFound, ValueError):
        return []
    return [
        desc.access_location.value
        for desc in aia
        if desc.access_method == AuthorityInformationAccessOID.CA_ISSUERS
        and isinstance(desc.access_location, x509.UniformResourceIdentifier)
    ]


def fetch_issuer_from_url(session, url: str) -> list[x509.Certificate]:
    """Download certificates (DER or PEM) from ``url``."""
    response = session.get(url, timeout=TIMEOUT_SECONDS)
    if not 200 <= response.status_code < 300:
        raise ValueError(f"{url}: HTTP {response.status_code}")
    body = response.content
    try:
        return [x509.load_der_x509_certificate(body)]
    except ValueError:
        pass
    try:
        return x509.load_pem_x509_certificates(body)
    except ValueError as exc:
        raise ValueError(f"unrecognized certificate format from {url}") from exc


def is_self_issued(cert: x509.Certificate) -> bool:
    """True when subject and issuer are the same name."""
    return cert.subject == cert.issuer


def _default_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    session.max_redirects = MAX_REDIRECTS
    return session


def _find_issuer(session, cert: x509.Certificate) -> x509.Certificate | None:
    for url in aia_ca_issuers_urls(cert):
        try:
            candidates = fetch_issuer_from_url(session, url)
        except (requests.RequestException, ValueError):
            continue
        for candidate in candidates:
            if candidate.subject == cert.issuer:
                return candidate
    return None


def build_bundle_from_leaf(leaf: x509.Certificate, session=None) -> list[x509.Certificate]:
    """Follow caIssuers links from ``leaf`` until a self-issued cert, a gap or a loop."""
    session = session or _default_session()
    chain = [leaf]
    seen = {leaf.subject}
    while not is_self_issued(chain[-1]):
        issuer = _find_issuer(session, chain[-1])
        if issuer is None or issuer.subject in seen:
            break
        chain.append(issuer)
        seen.add(issuer.subject)
    return chain


def build_bundle_from_leaf_file(input_path) -> list[x509.Certificate]:
    """Read a leaf certificate (PEM or DER) from a file and build its bundle."""
    path = Path(input_path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise OSError(f"failed to read input file {path}: {exc}") from exc
    return build_bundle_from_leaf(parse_single_cert(data))


def write_pem_bundle(output_path, chain: Sequence[x509.Certificate]) -> None:
    """Write the certificates as concatenated PEM, replacing any existing file."""
    path = Path(output_path)
    try:
        path.write_bytes(b"".join(cert.public_bytes(Encoding.PEM) for cert in chain))
    except OSError as exc:
        raise OSError(f"failed to write bundle to {path}: {exc}") from exc