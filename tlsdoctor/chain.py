"""Best-effort ordering of a certificate set into a leaf-to-root chain."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from cryptography import x509


def _der(name: x509.Name) -> bytes:
    return name.public_bytes()


def order_chain_leaf_to_root(
    certs: Sequence[x509.Certificate],
) -> tuple[list[x509.Certificate], list[x509.Certificate]]:
    """Order certificates from leaf to root.

    A leaf is a certificate whose subject issues nothing else in the set; issuer
    links are followed until a self-issued certificate, a gap or a loop. Returns
    the ordered chain and the certificates that are not part of it.
    """
    if not certs:
        raise ValueError("no certificates to order")

    by_subject: dict[bytes, list[int]] = defaultdict(list)
    for index, cert in enumerate(certs):
        by_subject[_der(cert.subject)].append(index)

    issuer_subjects = {_der(cert.issuer) for cert in certs}
    leaf_index = next(
        (
            index
            for index, cert in enumerate(certs)
            if _der(cert.subject) not in issuer_subjects
        ),
        0,
    )

    sequence = [leaf_index]
    current = leaf_index
    while True:
        issuer = _der(certs[current].issuer)
        if issuer == _der(certs[current].subject):
            break
        candidates = by_subject.get(issuer)
        if not candidates:
            break
        following = candidates[0]
        if following in sequence:
            break
        sequence.append(following)
        current = following

    used = set(sequence)
    ordered = [certs[index] for index in sequence]
    unused = [cert for index, cert in enumerate(certs) if index not in used]
    return ordered, unused