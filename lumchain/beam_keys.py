"""Store keys and constants of the beam module."""

MODULE_NAME = "beam"
MODULE_VERSION = 1
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
MEM_STORE_KEY = "mem_capability"

BEAMS_PREFIX = b"\x01"
OPEN_BEAMS_QUEUE_PREFIX = b"\x02"
CLOSED_BEAMS_QUEUE_PREFIX = b"\x03"

BEAM_SCHEMA_REVIEW = "lum-network/review"
BEAM_SCHEMA_REWARD = "lum-network/reward"

TYPE_MSG_OPEN_BEAM = "OpenBeam"
TYPE_MSG_UPDATE_BEAM = "UpdateBeam"
TYPE_MSG_CLAIM_BEAM = "ClaimBeam"

QUERY_FETCH_BEAMS = "fetch-beams"
QUERY_GET_BEAM = "get-beam"

EVENT_TYPE_OPEN_BEAM = "open_beam"
EVENT_TYPE_UPDATE_BEAM = "update_beam"
EVENT_TYPE_CLAIM_BEAM = "claim_beam"
ATTRIBUTE_KEY_OPENER = "opener"
ATTRIBUTE_KEY_UPDATER = "updater"
ATTRIBUTE_KEY_CLAIMER = "claimer"

DEFAULT_BEAM_DENOM = "ulum"


def get_beam_id_bytes(beam_id: str) -> bytes:
    return beam_id.encode()


def get_beam_id_from_bytes(raw: bytes) -> str:
    return bytes(raw).decode()


def get_beam_key(beam_id: str) -> bytes:
    return BEAMS_PREFIX + get_beam_id_bytes(beam_id)


def get_open_beam_queue_key(beam_id: str) -> bytes:
    return OPEN_BEAMS_QUEUE_PREFIX + get_beam_id_bytes(beam_id)


def get_closed_beam_queue_key(beam_id: str) -> bytes:
    return CLOSED_BEAMS_QUEUE_PREFIX + get_beam_id_bytes(beam_id)


def split_beam_key(key: bytes) -> bytes:
    return key[1:]


def split_open_beam_queue_key(key: bytes) -> bytes:
    return key[1:]


def split_closed_beam_queue_key(key: bytes) -> bytes:
    return key[1:]