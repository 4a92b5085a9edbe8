"""Command line interface: diagnose a server or PEM bundle, or scaffold a bundle."""

from __future__ import annotations

import argparse
import socket
import ssl
import sys
from collections.abc import Sequence
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm

from .chain import order_chain_leaf_to_root
from .printing import print_cert_info, print_chain_with_separator
from .scaffold import build_bundle_from_leaf_file, write_pem_bundle
from .util import issuer_cn, subject_cn
from .validate import ValidationSetupError, validate_and_report, validate_chain

_PROG = "tls-doctor"
_VERSION = "0.1.0"
_CHAIN_HEADER = "--- Certificate chain (leaf -> root) ---"


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {text}") from exc
    if not 0 <= value <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the ``diag`` and ``scaffold`` subcommands."""
    parser = argparse.ArgumentParser(prog=_PROG, description="TLS inspector and tooling")
    parser.add_argument("-V", "--version", action="version", version=f"{_PROG} {_VERSION}")
    commands = parser.add_subparsers(dest="command", required=True)

    diag = commands.add_parser("diag", help="Diagnose a live server or a PEM bundle")
    source = diag.add_mutually_exclusive_group(required=True)
    source.add_argument("-s", "--server", help="Domain name or IP of the server to connect to")
    source.add_argument(
        "-f", "--file", type=Path, help="PEM bundle file (one or more concatenated certificates)"
    )
    diag.add_argument(
        "-p", "--port", type=_port, default=443, help="Port of the server (default: 443)"
    )
    diag.add_argument(
        "--insecure",
        action="store_true",
        help="Disable certificate verification. Useful for inspecting invalid chains.",
    )
    diag.set_defaults(handler=run_diag)

    scaffold = commands.add_parser(
        "scaffold", help="Scaffold a complete bundle from a leaf certificate file"
    )
    scaffold.add_argument(
        "-i", "--input", type=Path, required=True, help="Input leaf certificate file (PEM or DER)"
    )
    scaffold.add_argument(
        "-o",
        "--output",
        type=Path,
        required=True,
        help="Output bundle destination (PEM); will be created/overwritten",
    )
    scaffold.set_defaults(handler=run_scaffold)
    return parser


def _cn_label(cn: str | None) -> str:
    return f"CN={cn}" if cn is not None else "<unknown>"


def _verifies_itself(cert: x509.Certificate) -> bool:
    try:
        cert.verify_directly_issued_by(cert)
    except (InvalidSignature, ValueError, TypeError, UnsupportedAlgorithm):
        return False
    return True


def bundle_issues(
    seq: Sequence[x509.Certificate], unused: Sequence[x509.Certificate]
) -> list[str]:
    """Report bundle consistency problems: unrelated certs, a missing issuer, a bad root."""
    issues: list[str] = []
    if unused:
        labels = ", ".join(_cn_label(subject_cn(cert)) for cert in unused)
        issues.append(f"bundle contains unrelated certificate(s): {labels}")
    if seq:
        last = seq[-1]
        if last.subject != last.issuer:
            issues.append(f"chain incomplete: missing issuer for {_cn_label(issuer_cn(last))}")
        elif not _verifies_itself(last):
            issues.append("root certificate signature does not verify itself")
    return issues


def _print_issues(issues: Sequence[str]) -> None:
    print("❌ the chain has issues:")
    for issue in issues:
        print(f"- {issue}")


def run_with_file(path) -> list[str]:
    """Inspect a PEM bundle offline, print the chain and verdict, and return the issues."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise OSError(f"failed to read PEM bundle from {path}: {exc}") from exc
    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError as exc:
        raise ValueError(f"failed to parse PEM certificates from {path}: {exc}") from exc
    if not certs:
        raise ValueError(f"no certificates found in {path}")

    seq, unused = order_chain_leaf_to_root(certs)

    print(_CHAIN_HEADER)
    print_chain_with_separator(seq)
    for index, cert in enumerate(unused, start=len(seq) + 1):
        print_cert_info(index, cert)

    issues = bundle_issues(seq, unused)
    try:
        problem = validate_chain(seq[0], seq[1:])
    except ValidationSetupError as exc:
        problem = f"validation error: {exc}"
    if problem is not None:
        issues.append(problem)

    if issues:
        _print_issues(issues)
    else:
        print("✅ the chain is valid")
    return issues


def _peer_chain(tls: ssl.SSLSocket) -> list[x509.Certificate]:
    leaf_der = tls.getpeercert(binary_form=True)
    seq: list[x509.Certificate] = []
    if leaf_der:
        seq.append(x509.load_der_x509_certificate(leaf_der))
    chain_getter = getattr(tls, "get_unverified_chain", None)
    for der in chain_getter() if chain_getter is not None else []:
        if leaf_der and der == leaf_der:
            continue
        seq.append(x509.load_der_x509_certificate(der))
    return seq


def run_diag(args: argparse.Namespace) -> None:
    """Diagnose a bundle file, or the chain a live server presents."""
    if args.file is not None:
        run_with_file(args.file)
        return

    server = args.server
    addr = f"{server}:{args.port}"
    context = ssl.create_default_context()
    if args.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    try:
        tcp = socket.create_connection((server, args.port))
    except OSError as exc:
        raise ConnectionError(f"failed to connect to {addr}: {exc}") from exc

    with tcp:
        try:
            tls = context.wrap_socket(tcp, server_hostname=server)
        except OSError as exc:
            raise ConnectionError(f"TLS handshake with {addr} failed: {exc}") from exc
        with tls:
            seq = _peer_chain(tls)

    print(_CHAIN_HEADER)
    print_chain_with_separator(seq)
    validate_and_report(seq)


def run_scaffold(args: argparse.Namespace) -> None:
    """Build a bundle from a leaf certificate file and write it as PEM."""
    chain = build_bundle_from_leaf_file(args.input)
    write_pem_bundle(args.output, chain)
    print(f"wrote {len(chain)} certificate(s) to {args.output}")


def main(argv=None) -> int:
    """Run the command line; return the process exit status."""
    args = build_parser().parse_args(argv)
    try:
        args.handler(args)
    except (OSError, ValueError, ValidationSetupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())