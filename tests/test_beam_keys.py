from lumchain.beam_keys import (
    BEAMS_PREFIX,
    CLOSED_BEAMS_QUEUE_PREFIX,
    OPEN_BEAMS_QUEUE_PREFIX,
    get_beam_id_from_bytes,
    get_beam_key,
    get_closed_beam_queue_key,
    get_open_beam_queue_key,
    split_beam_key,
    split_closed_beam_queue_key,
    split_open_beam_queue_key,
)
from lumchain.beam_utils import generate_secure_token


def test_beam_key():
    beam_id = generate_secure_token(8)
    key = get_beam_key(beam_id)
    assert key.decode() != beam_id
    assert key.startswith(BEAMS_PREFIX)
    assert get_beam_id_from_bytes(split_beam_key(key)) == beam_id


def test_open_beams_queue_key():
    beam_id = generate_secure_token(8)
    key = get_open_beam_queue_key(beam_id)
    assert key.decode() != beam_id
    assert key.startswith(OPEN_BEAMS_QUEUE_PREFIX)
    assert get_beam_id_from_bytes(split_open_beam_queue_key(key)) == beam_id


def test_closed_beams_queue_key():
    beam_id = generate_secure_token(8)
    key = get_closed_beam_queue_key(beam_id)
    assert key.decode() != beam_id
    assert key.startswith(CLOSED_BEAMS_QUEUE_PREFIX)
    assert get_beam_id_from_bytes(split_closed_beam_queue_key(key)) == beam_id


def test_prefix_bytes():
    assert get_beam_key("a") == b"\x01a"