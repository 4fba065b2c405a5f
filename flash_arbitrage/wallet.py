"""
Wallet loading.

The secret is a base58-encoded 64-byte ed25519 keypair (32-byte seed followed
by the 32-byte public key), as exported by Solana wallets.
"""

from dataclasses import dataclass, field

import base58
from solders.keypair import Keypair

from .exceptions import ConfigurationError

KEYPAIR_LENGTH = 64


@dataclass(frozen=True)
class Wallet:
    public_key: str
    keypair: Keypair = field(repr=False)


def load_wallet(secret_b58: str) -> Wallet:
    """
    Decode a base58 keypair and check that its public half matches the seed.

    Raises:
        ConfigurationError: If the secret is empty, not base58, not 64 bytes,
            or not a consistent ed25519 keypair
    """
    if not secret_b58 or not secret_b58.strip():
        raise ConfigurationError("WALLET_PRIVATE_KEY not found in environment variables")

    try:
        raw = base58.b58decode(secret_b58.strip())
    except ValueError as e:
        raise ConfigurationError(f"WALLET_PRIVATE_KEY is not valid base58: {e}") from e

    # seed and public key are 32 bytes each
    if len(raw) != KEYPAIR_LENGTH:
        raise ConfigurationError(
            f"WALLET_PRIVATE_KEY must decode to {KEYPAIR_LENGTH} bytes, got {len(raw)}"
        )

    try:
        keypair = Keypair.from_seed(raw[:32])
    except ValueError as e:
        raise ConfigurationError(
            f"WALLET_PRIVATE_KEY is not a valid ed25519 keypair: {e}"
        ) from e
    if bytes(keypair.pubkey()) != raw[32:]:
        raise ConfigurationError(
            "WALLET_PRIVATE_KEY is not a valid ed25519 keypair: "
            "public key does not match the seed"
        )

    return Wallet(public_key=str(keypair.pubkey()), keypair=keypair)
