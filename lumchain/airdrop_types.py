"""Keys, parameters, claim records and genesis state of the airdrop module."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional

from lumchain.ledger import Coin, ChainError, InvalidCoinsError

MODULE_NAME = "airdrop"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
MEM_STORE_KEY = "mem_airdrop"
CLAIM_RECORDS_STORE_PREFIX = "claimrecords"
PARAMS_KEY = "params"
ACTION_KEY = "action"

EVENT_TYPE_CLAIM = "claim"

DEFAULT_INDEX = 1
DEFAULT_CLAIM_DENOM = "ulum"
DEFAULT_DURATION_UNTIL_DECAY = timedelta(hours=1)
DEFAULT_DURATION_OF_DECAY = timedelta(hours=5)

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_MICROSECOND = timedelta(microseconds=1)


class Action(IntEnum):
    """Actions that release a share of an airdrop claim."""

    VOTE = 0
    DELEGATE_STAKE = 1


ACTION_NAMES = {
    "ActionVote": Action.VOTE,
    "ActionDelegateStake": Action.DELEGATE_STAKE,
}


def _coin_to_dict(coin: Coin) -> dict:
    return {"denom": coin.denom, "amount": str(coin.amount)}


def _coin_from_dict(data: Optional[dict]) -> Coin:
    if not data:
        return Coin("", 0)
    return Coin(data.get("denom", ""), int(data.get("amount", 0)))


def _duration_to_str(value: timedelta) -> str:
    seconds, micros = divmod(value // _MICROSECOND, 1_000_000)
    return f"{seconds}.{micros:06d}s" if micros else f"{seconds}s"


def _duration_from_str(text: Any) -> timedelta:
    if isinstance(text, (int, float)):
        return timedelta(seconds=text)
    micros = Decimal(str(text).rstrip("s") or "0") * 1_000_000
    return timedelta(microseconds=int(micros))


@dataclass
class ClaimRecord:
    """Initial claimable amounts (free, vested) of an address and its completed actions."""

    address: str = ""
    initial_claimable_amount: list = field(default_factory=list)
    action_completed: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "initial_claimable_amount": [_coin_to_dict(c) for c in self.initial_claimable_amount],
            "action_completed": list(self.action_completed),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClaimRecord":
        return cls(
            address=data.get("address", ""),
            initial_claimable_amount=[
                _coin_from_dict(c) for c in data.get("initial_claimable_amount") or []
            ],
            action_completed=[bool(b) for b in data.get("action_completed") or []],
        )


@dataclass
class AirdropParams:
    airdrop_start_time: datetime = ZERO_TIME
    duration_until_decay: timedelta = timedelta(0)
    duration_of_decay: timedelta = timedelta(0)
    claim_denom: str = ""

    def to_dict(self) -> dict:
        return {
            "airdrop_start_time": self.airdrop_start_time.isoformat(),
            "duration_until_decay": _duration_to_str(self.duration_until_decay),
            "duration_of_decay": _duration_to_str(self.duration_of_decay),
            "claim_denom": self.claim_denom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AirdropParams":
        start = data.get("airdrop_start_time")
        return cls(
            airdrop_start_time=ZERO_TIME if not start else datetime.fromisoformat(start),
            duration_until_decay=_duration_from_str(data.get("duration_until_decay", "0s")),
            duration_of_decay=_duration_from_str(data.get("duration_of_decay", "0s")),
            claim_denom=data.get("claim_denom", ""),
        )


@dataclass
class AirdropGenesisState:
    module_account_balance: Coin = field(default_factory=lambda: Coin("", 0))
    params: AirdropParams = field(default_factory=AirdropParams)
    claim_records: list = field(default_factory=list)

    def validate(self) -> None:
        """Check that the claimables are valid and sum to the module balance."""
        self.module_account_balance.validate()

        denom = self.params.claim_denom
        total = Coin(denom, 0)
        for record in self.claim_records:
            for claimable in record.initial_claimable_amount:
                try:
                    claimable.validate()
                except ChainError as exc:
                    raise InvalidCoinsError(
                        f"Claimable invalid for address {record.address}"
                    ) from exc
                if claimable.denom != denom:
                    raise InvalidCoinsError(f"Tried to commit invalid denom {claimable.denom}")
                total = total.add(claimable)

        balance = self.module_account_balance
        if denom != balance.denom:
            raise InvalidCoinsError(
                f"Denom for module and claim does not match {denom} != {balance.denom}"
            )
        if total != balance:
            raise InvalidCoinsError(
                f"Balance is different from total of claimable: {total} != {balance}"
            )


def default_genesis() -> AirdropGenesisState:
    return AirdropGenesisState(
        module_account_balance=Coin(DEFAULT_CLAIM_DENOM, 0),
        params=AirdropParams(
            airdrop_start_time=ZERO_TIME,
            duration_until_decay=DEFAULT_DURATION_UNTIL_DECAY,
            duration_of_decay=DEFAULT_DURATION_OF_DECAY,
            claim_denom=DEFAULT_CLAIM_DENOM,
        ),
        claim_records=[],
    )


def genesis_from_app_state(app_state: dict) -> AirdropGenesisState:
    """Read the airdrop genesis state from an application state mapping."""
    raw = app_state.get(MODULE_NAME)
    if raw is None:
        return AirdropGenesisState()
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return AirdropGenesisState(
        module_account_balance=_coin_from_dict(data.get("module_account_balance")),
        params=AirdropParams.from_dict(data.get("params") or {}),
        claim_records=[ClaimRecord.from_dict(r) for r in data.get("claim_records") or []],
    )