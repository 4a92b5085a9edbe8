import datetime
import types
from unittest import mock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from tlsdoctor.validate import (
    ValidationSetupError,
    load_system_trust_store,
    validate_and_report,
    validate_chain,
)


def _key():
    return ec.generate_private_key(ec.SECP256R1())


def _cert(cn, key, issuer=None, issuer_key=None, days=(0, 365)):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(issuer.subject if issuer else name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now + datetime.timedelta(days=days[0] - 1))
        .not_valid_after(now + datetime.timedelta(days=days[1]))
        .sign(issuer_key or key, hashes.SHA256())
    )


def _trust(tmp_path, certs):
    cafile = tmp_path / "ca.pem"
    cafile.write_bytes(b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certs))
    paths = types.SimpleNamespace(cafile=str(cafile), capath=None)
    return mock.patch("ssl.get_default_verify_paths", return_value=paths)


@pytest.fixture
def pki():
    rk, ik, lk = _key(), _key(), _key()
    root = _cert("RootCA", rk)
    inter = _cert("IntermCA", ik, root, rk)
    leaf = _cert("Leaf", lk, inter, ik)
    return root, inter, leaf


def test_valid_chain(tmp_path, pki):
    root, inter, leaf = pki
    with _trust(tmp_path, [root]):
        assert validate_chain(leaf, [inter]) is None


def test_missing_intermediate(tmp_path, pki):
    root, _, leaf = pki
    with _trust(tmp_path, [root]):
        msg = validate_chain(leaf, [])
    assert msg.startswith("unable to get local issuer certificate (depth 0 on ")
    assert "Leaf" in msg


def test_untrusted_self_signed_leaf(tmp_path, pki):
    root, _, _ = pki
    other = _cert("Other", _key())
    with _trust(tmp_path, [root]):
        assert validate_chain(other, []).startswith("self-signed certificate (depth 0")


def test_untrusted_root_in_chain(tmp_path, pki):
    root, inter, leaf = pki
    with _trust(tmp_path, []):
        msg = validate_chain(leaf, [inter, root])
    assert msg.startswith("self-signed certificate in certificate chain (depth 2")


def test_expired_leaf(tmp_path, pki):
    root, inter, _ = pki
    ik = _key()
    inter2 = _cert("IntermCA", ik, root, _key())
    expired = _cert("Old", _key(), inter2, ik, days=(-30, -1))
    with _trust(tmp_path, [root]):
        assert validate_chain(expired, [inter]).startswith("certificate has expired")


def test_load_store_reads_cafile(tmp_path, pki):
    root, _, _ = pki
    with _trust(tmp_path, [root]):
        assert load_system_trust_store() == [root]


def test_bad_cafile_raises(tmp_path):
    cafile = tmp_path / "ca.pem"
    cafile.write_bytes(b"garbage")
    paths = types.SimpleNamespace(cafile=str(cafile), capath=None)
    with mock.patch("ssl.get_default_verify_paths", return_value=paths):
        with pytest.raises(ValidationSetupError):
            load_system_trust_store()


def test_report_output(tmp_path, pki, capsys):
    root, inter, leaf = pki
    with _trust(tmp_path, [root]):
        validate_and_report([leaf, inter])
        validate_and_report([leaf])
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "✅ the chain is valid"
    assert out[1] == "❌ the chain has issues:"
    assert out[2].startswith("- unable to get local issuer certificate")