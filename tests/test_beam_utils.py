import pytest

from lumchain.beam_utils import (
    compare_hash_and_string,
    extract_coin_from_string,
    generate_hash_from_string,
    generate_secure_token,
)
from lumchain.ledger import Coin, InvalidCoinsError


def test_token_is_hex_of_requested_length():
    token = generate_secure_token(8)
    assert len(token) == 16
    assert bytes.fromhex(token).hex() == token


def test_hash_of_empty_string():
    assert generate_hash_from_string("").hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_compare_hash_and_string():
    digest = generate_hash_from_string("abc").hex()
    assert compare_hash_and_string(digest, "abc")
    assert not compare_hash_and_string(digest, "abd")


def test_extract_coin():
    assert extract_coin_from_string("100stake") == Coin("stake", 100)
    with pytest.raises(InvalidCoinsError):
        extract_coin_from_string("nope")