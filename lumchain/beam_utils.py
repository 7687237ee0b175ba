"""Token, hashing and coin helpers for beams."""

import hashlib
import secrets

from lumchain.ledger import Coin, parse_coin


def generate_secure_token(length: int) -> str:
    """Return `length` random bytes as a hex string."""
    return secrets.token_hex(length)


def generate_hash_from_string(secret: str) -> bytes:
    return hashlib.sha256(secret.encode()).digest()


def compare_hash_and_string(hash_hex: str, secret: str) -> bool:
    return generate_hash_from_string(secret).hex() == hash_hex


def extract_coin_from_string(amount: str) -> Coin:
    return parse_coin(amount)