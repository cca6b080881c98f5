"""Deterministic record addressing.

Records are located by hashing fixed labels, the owner identity and a
one-byte discriminant ("bump") together with the program id. The mapping is
a pure function; nothing here touches storage.
"""
from __future__ import annotations

import hashlib

POOL_SEED = b"lending_pool"
POSITION_SEED = b"user_position"

CANONICAL_BUMP = 255
_DOMAIN_MARKER = b"ProgramDerivedAddress"


def _as_bytes(seed: bytes | str) -> bytes:
    return seed.encode() if isinstance(seed, str) else seed


def derive_address(
    seeds: tuple[bytes | str, ...], bump: int, program_id: str
) -> str:
    """Hash ``seeds`` + ``bump`` + ``program_id`` into a hex address."""
    if not 0 <= bump <= 255:
        raise ValueError(f"bump must fit in one byte, got {bump}")
    digest = hashlib.sha256()
    for seed in seeds:
        digest.update(_as_bytes(seed))
    digest.update(bytes([bump]))
    digest.update(program_id.encode())
    digest.update(_DOMAIN_MARKER)
    return digest.hexdigest()


def find_address(
    seeds: tuple[bytes | str, ...], program_id: str
) -> tuple[str, int]:
    """Return the canonical ``(address, bump)`` pair for ``seeds``."""
    return derive_address(seeds, CANONICAL_BUMP, program_id), CANONICAL_BUMP


def pool_address(program_id: str) -> str:
    return find_address((POOL_SEED,), program_id)[0]


def position_address(owner: str, program_id: str) -> str:
    return find_address((POSITION_SEED, owner), program_id)[0]
