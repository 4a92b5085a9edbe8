# tlsdoctor

A small command-line tool for looking at TLS certificate chains.

It can:

- connect to a live server, print the certificate chain it presents (leaf to
  root), and check that chain against the system trust store;
- read a PEM bundle from disk, put its certificates in leaf-to-root order,
  and report problems such as unrelated certificates, a missing issuer or a
  root that does not verify its own signature;
- build a complete PEM bundle from a single leaf certificate by following
  the Authority Information Access "CA Issuers" links in each certificate.

## Installation

```
pip install .
```

This installs the `tls-doctor` command. `tls-doctor --version` prints the
version.

## Usage

### Diagnose a live server

```
tls-doctor diag --server www.example.com
tls-doctor diag -s www.example.com -p 8443
```

The port defaults to 443. Use `--insecure` to turn off certificate and
hostname verification during the handshake, so that the chain of a server
with a broken or untrusted setup can still be shown:

```
tls-doctor diag -s self-signed.example.com --insecure
```

### Diagnose a PEM bundle

```
tls-doctor diag --file bundle.pem
```

`--server` and `--file` are mutually exclusive; one of them is required.

The certificates in the bundle do not need to be in any particular order.
A leaf is picked (a certificate whose subject issues nothing else in the
bundle) and issuer links are followed until a self-issued certificate, a gap
or a loop. Certificates that do not belong to the chain are listed after it
and reported as unrelated.

For every certificate the output shows:

- the inferred certificate type (Domain, Organization or Extended
  Validation, judged only from the subject attributes: an Organization
  attribute, and a Serial Number attribute as well for Extended Validation);
- the subject and issuer (common name, organization, organizational unit,
  country, state/province, locality);
- the public key algorithm and size;
- the SHA-256 fingerprint.

It ends with either `✅ the chain is valid` or `❌ the chain has issues:`
followed by a list of the problems found.

### Build a full bundle from a leaf certificate

```
tls-doctor scaffold --input leaf.crt --output fullchain.pem
```

The input may be PEM (the first certificate is used) or DER. Intermediates
(and the root, when it is published) are downloaded from the caIssuers URLs
in each certificate's AIA extension until a self-issued certificate is
reached, no further issuer can be found, or a subject repeats. The result is
written as concatenated PEM, leaf first, replacing any existing file.

On errors such as an unreadable file, unparsable certificates or a failed
connection, the command prints `Error: ...` to standard error and exits with
status 1.

## Using it from Python

The building blocks are plain functions working on
`cryptography.x509.Certificate` objects:

```python
from cryptography import x509
from tlsdoctor.chain import order_chain_leaf_to_root
from tlsdoctor.util import subject_cn, infer_cert_type
from tlsdoctor.validate import validate_chain

with open("bundle.pem", "rb") as fh:
    certs = x509.load_pem_x509_certificates(fh.read())

ordered, unused = order_chain_leaf_to_root(certs)
for cert in ordered:
    print(subject_cn(cert), infer_cert_type(cert))

problem = validate_chain(ordered[0], ordered[1:])
print(problem or "valid")
```

Modules:

- `tlsdoctor.util` – name attributes (`name_items`, `format_name_human`,
  `subject_cn`, `issuer_cn`), `fingerprint_sha256`, `ec_curve_name`,
  `infer_cert_type`;
- `tlsdoctor.chain` – `order_chain_leaf_to_root`;
- `tlsdoctor.validate` – `load_system_trust_store`, `validate_chain`,
  `validate_and_report`, `ValidationSetupError`;
- `tlsdoctor.printing` – `describe_public_key`, `format_cert_info`,
  `print_cert_info`, `print_chain_with_separator`;
- `tlsdoctor.scaffold` – `parse_single_cert`, `aia_ca_issuers_urls`,
  `fetch_issuer_from_url`, `is_self_issued`, `build_bundle_from_leaf`,
  `build_bundle_from_leaf_file`, `write_pem_bundle`;
- `tlsdoctor.cli` – `build_parser`, `bundle_issues`, `run_with_file`,
  `run_diag`, `run_scaffold`, `main`.

## Limitations

- Chain validation is a simple path check: validity dates, issuer names and
  signatures, ending at a certificate from the platform's default CA
  locations. It does not check revocation, key usage, basic constraints,
  name constraints or policies.
- For a live server, the intermediates the server sent can only be shown on
  Python versions whose `ssl` sockets offer `get_unverified_chain`; otherwise
  only the leaf certificate is shown and validated.

## Running the tests

```
pip install ".[test]"
pytest
```