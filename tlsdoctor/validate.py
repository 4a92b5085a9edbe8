"""Path validation of a certificate chain against the system trust store."""

from __future__ import annotations

import datetime
import ssl
from collections.abc import Sequence
from pathlib import Path

from cryptography import x509

from .util import format_name_human


class ValidationSetupError(Exception):
    """Raised when verification cannot be set up, e.g. an unreadable trust store."""


def load_system_trust_store() -> list[x509.Certificate]:
    """Load the trusted CA certificates from the platform's default locations."""
    paths = ssl.get_default_verify_paths()
    anchors: list[x509.Certificate] = []
    if paths.cafile and Path(paths.cafile).is_file():
        try:
            anchors.extend(x509.load_pem_x509_certificates(Path(paths.cafile).read_bytes()))
        except (OSError, ValueError) as exc:
            raise ValidationSetupError(f"cannot load trust store {paths.cafile}: {exc}") from exc
    if paths.capath and Path(paths.capath).is_dir():
        for entry in sorted(Path(paths.capath).iterdir()):
            try:
                anchors.extend(x509.load_pem_x509_certificates(entry.read_bytes()))
            except (OSError, ValueError):
                continue
    return anchors


def _issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    if issuer.subject != cert.issuer:
        return False
    try:
        cert.verify_directly_issued_by(issuer)
    except Exception:
        return False
    return True


def _validity_error(cert: x509.Certificate, now: datetime.datetime) -> str | None:
    if now < cert.not_valid_before_utc:
        return "certificate is not yet valid"
    if now > cert.not_valid_after_utc:
        return "certificate has expired"
    return None


def _failure(message: str, depth: int, cert: x509.Certificate) -> str:
    subject = format_name_human(cert.subject) or "<unknown subject>"
    return f"{message} (depth {depth} on {subject})"


def validate_chain(
    leaf: x509.Certificate, intermediates: Sequence[x509.Certificate]
) -> str | None:
    """Verify ``leaf`` with optional intermediates against the system trust store.

    Returns None when the chain verifies, otherwise a message describing the
    failure. Raises ValidationSetupError if the trust store cannot be loaded.
    """
    anchors = load_system_trust_store()
    anchor_ders = {anchor.public_bytes(_DER) for anchor in anchors}
    now = datetime.datetime.now(datetime.timezone.utc)

    path = [leaf]
    while True:
        current = path[-1]
        depth = len(path) - 1
        problem = _validity_error(current, now)
        if problem:
            return _failure(problem, depth, current)
        if current.public_bytes(_DER) in anchor_ders:
            return None
        anchor = next((a for a in anchors if _issued_by(current, a)), None)
        if anchor is not None:
            problem = _validity_error(anchor, now)
            return _failure(problem, depth + 1, anchor) if problem else None
        following = next(
            (c for c in intermediates if c not in path and _issued_by(current, c)),
            None,
        )
        if following is not None:
            path.append(following)
            continue
        if current.subject == current.issuer:
            message = (
                "self-signed certificate"
                if depth == 0
                else "self-signed certificate in certificate chain"
            )
        else:
            message = "unable to get local issuer certificate"
        return _failure(message, depth, current)


def validate_and_report(seq: Sequence[x509.Certificate]) -> None:
    """Validate a leaf-first chain and print the verdict."""
    if not seq:
        return
    try:
        problem = validate_chain(seq[0], seq[1:])
    except ValidationSetupError as exc:
        problem = f"validation error: {exc}"
    if problem is None:
        print("✅ the chain is valid")
    else:
        print("❌ the chain has issues:")
        print(f"- {problem}")


from cryptography.hazmat.primitives.serialization import Encoding as _Encoding  # noqa: E402

_DER = _Encoding.DER