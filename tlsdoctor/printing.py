"""Human-oriented rendering of certificates and chains."""

from __future__ import annotations

from collections.abc import Sequence

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa, x448, x25519

from .util import BLUE, BOLD, RESET, ec_curve_name, fingerprint_sha256, infer_cert_type, name_items


def describe_public_key(cert: x509.Certificate) -> str:
    """Return the key algorithm and size, e.g. ``RSA 2048 bits``."""
    key = cert.public_key()
    if isinstance(key, rsa.RSAPublicKey):
        alg, bits = "RSA", key.key_size
    elif isinstance(key, ec.EllipticCurvePublicKey):
        curve = ec_curve_name(key)
        alg, bits = (f"EC ({curve})" if curve else "EC"), key.curve.key_size
    elif isinstance(key, ed25519.Ed25519PublicKey):
        alg, bits = "Ed25519", 253
    elif isinstance(key, ed448.Ed448PublicKey):
        alg, bits = "Ed448", 456
    elif isinstance(key, x25519.X25519PublicKey):
        alg, bits = "X25519", 253
    elif isinstance(key, x448.X448PublicKey):
        alg, bits = "X448", 448
    elif isinstance(key, dsa.DSAPublicKey):
        alg, bits = "DSA", key.key_size
    else:
        alg, bits = type(key).__name__, getattr(key, "key_size", 0)
    return f"{alg} {bits} bits"


def format_cert_info(index: int, cert: x509.Certificate) -> str:
    """Render one certificate as a numbered block of text, ending with a blank line."""
    lines = [f"[{index}]", f"  {BOLD}Subject:{RESET}"]
    lines.append(f"    - {BOLD}Type:{RESET} {BLUE}{infer_cert_type(cert)}{RESET}")
    lines.extend(
        f"    - {BOLD}{label}:{RESET} {BLUE}{value}{RESET}" for label, value in name_items(cert.subject)
    )
    lines.append(f"  {BOLD}Issuer:{RESET}  ")
    lines.extend(
        f"    - {BOLD}{label}:{RESET} {BLUE}{value}{RESET}" for label, value in name_items(cert.issuer)
    )
    lines.append(f"  {BOLD}Public Key:{RESET} {BLUE}{describe_public_key(cert)}{RESET}")
    lines.append(f"  {BOLD}SHA-256 Fingerprint:{RESET} {BLUE}{fingerprint_sha256(cert)}{RESET}")
    lines.append("")
    return "\n".join(lines) + "\n"


def print_cert_info(index: int, cert: x509.Certificate) -> None:
    """Print one certificate block."""
    print(format_cert_info(index, cert), end="")


def print_chain_with_separator(seq: Sequence[x509.Certificate]) -> None:
    """Print a chain, joining consecutive certificates with ``is issued by ->``."""
    for position, cert in enumerate(seq, start=1):
        print_cert_info(position, cert)
        if position < len(seq):
            print("is issued by ->")