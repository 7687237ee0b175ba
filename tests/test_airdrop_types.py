import json
from datetime import datetime, timedelta, timezone

import pytest

from lumchain.airdrop_types import (
    Action,
    AirdropGenesisState,
    AirdropParams,
    ClaimRecord,
    default_genesis,
    genesis_from_app_state,
)
from lumchain.ledger import Coin, InvalidCoinsError, address_to_bech32

DENOM = "stake"
NOW = datetime(2021, 11, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


def _record(raw: bytes, free: int, vested: int) -> ClaimRecord:
    return ClaimRecord(
        address=address_to_bech32(raw),
        initial_claimable_amount=[Coin(DENOM, free), Coin(DENOM, vested)],
        action_completed=[False, False],
    )


def _test_genesis() -> AirdropGenesisState:
    return AirdropGenesisState(
        module_account_balance=Coin(DENOM, 15_000),
        params=AirdropParams(
            airdrop_start_time=NOW,
            duration_until_decay=timedelta(hours=1),
            duration_of_decay=timedelta(hours=5),
            claim_denom=DENOM,
        ),
        claim_records=[
            _record(b"addr1---------------", 1_000, 5_000),
            _record(b"addr2---------------", 3_000, 2_000),
            _record(b"addr3---------------", 1_000, 3_000),
        ],
    )


def test_default_genesis_uses_documented_defaults():
    genesis = default_genesis()
    assert genesis.module_account_balance == Coin("ulum", 0)
    assert genesis.params.claim_denom == "ulum"
    assert genesis.params.duration_until_decay == timedelta(hours=1)
    assert genesis.params.duration_of_decay == timedelta(hours=5)
    assert genesis.claim_records == []
    assert genesis.validate() is None


def test_valid_genesis_then_balance_mismatch():
    genesis = _test_genesis()
    assert genesis.validate() is None
    genesis.module_account_balance = Coin(DENOM, 14_999)
    with pytest.raises(InvalidCoinsError, match="Balance is different"):
        genesis.validate()


def test_claimable_with_other_denom_is_rejected():
    genesis = _test_genesis()
    genesis.claim_records[0].initial_claimable_amount[0] = Coin("ulum", 1_000)
    with pytest.raises(InvalidCoinsError, match="invalid denom ulum"):
        genesis.validate()


def test_module_denom_must_match_claim_denom():
    genesis = AirdropGenesisState(
        module_account_balance=Coin("ulum", 0),
        params=AirdropParams(claim_denom=DENOM),
        claim_records=[],
    )
    with pytest.raises(InvalidCoinsError, match="does not match"):
        genesis.validate()


def test_negative_claimable_is_rejected():
    genesis = _test_genesis()
    genesis.claim_records[1].initial_claimable_amount[0] = Coin(DENOM, -1)
    with pytest.raises(InvalidCoinsError, match="Claimable invalid for address"):
        genesis.validate()


def test_claim_record_round_trip():
    record = _record(b"addr1---------------", 1_000, 5_000)
    record.action_completed = [True, False]
    restored = ClaimRecord.from_dict(json.loads(json.dumps(record.to_dict())))
    assert restored == record
    assert restored.action_completed[Action.VOTE] is True
    assert restored.action_completed[Action.DELEGATE_STAKE] is False


def test_params_round_trip_keeps_microseconds():
    params = AirdropParams(
        airdrop_start_time=NOW,
        duration_until_decay=timedelta(hours=2, microseconds=7),
        duration_of_decay=timedelta(hours=4),
        claim_denom=DENOM,
    )
    assert AirdropParams.from_dict(json.loads(json.dumps(params.to_dict()))) == params


def test_genesis_from_app_state():
    genesis = _test_genesis()
    payload = {
        "module_account_balance": {"denom": DENOM, "amount": "15000"},
        "params": genesis.params.to_dict(),
        "claim_records": [r.to_dict() for r in genesis.claim_records],
    }
    loaded = genesis_from_app_state({"airdrop": json.dumps(payload)})
    assert loaded == genesis
    assert genesis_from_app_state({}) == AirdropGenesisState()