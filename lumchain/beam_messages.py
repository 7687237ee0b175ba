"""Beam state, messages and genesis state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional

from lumchain.beam_keys import (
    BEAM_SCHEMA_REVIEW,
    BEAM_SCHEMA_REWARD,
    DEFAULT_BEAM_DENOM,
    MODULE_NAME,
    ROUTER_KEY,
    TYPE_MSG_CLAIM_BEAM,
    TYPE_MSG_OPEN_BEAM,
    TYPE_MSG_UPDATE_BEAM,
)
from lumchain.ledger import (
    Coin,
    InvalidAddressError,
    InvalidCoinsError,
    InvalidRequestError,
    address_from_bech32,
)

AMINO_NAMES = {
    TYPE_MSG_OPEN_BEAM: "lum-network/OpenBeam",
    TYPE_MSG_UPDATE_BEAM: "lum-network/UpdateBeam",
    TYPE_MSG_CLAIM_BEAM: "lum-network/ClaimBeam",
}


class BeamState(IntEnum):
    UNSPECIFIED = 0
    OPEN = 1
    CANCELED = 2
    CLOSED = 3


@dataclass
class BeamData:
    """Free-form beam metadata."""

    payload: dict = field(default_factory=dict)


def _coin_to_dict(coin: Optional[Coin]) -> Optional[dict]:
    return None if coin is None else {"denom": coin.denom, "amount": str(coin.amount)}


def _coin_from_dict(data: Optional[dict]) -> Optional[Coin]:
    return None if data is None else Coin(data.get("denom", ""), int(data.get("amount", 0)))


@dataclass
class Beam:
    creator_address: str = ""
    id: str = ""
    secret: str = ""
    status: BeamState = BeamState.UNSPECIFIED
    amount: Coin = field(default_factory=lambda: Coin("", 0))
    funds_withdrawn: bool = False
    claimed: bool = False
    hide_content: bool = False
    cancel_reason: str = ""
    schema: str = ""
    data: Optional[BeamData] = None
    claim_address: str = ""
    closes_at_block: int = 0
    claim_expires_at_block: int = 0
    closed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "creator_address": self.creator_address,
            "id": self.id,
            "secret": self.secret,
            "status": int(self.status),
            "amount": _coin_to_dict(self.amount),
            "funds_withdrawn": self.funds_withdrawn,
            "claimed": self.claimed,
            "hide_content": self.hide_content,
            "cancel_reason": self.cancel_reason,
            "schema": self.schema,
            "data": None if self.data is None else dict(self.data.payload),
            "claim_address": self.claim_address,
            "closes_at_block": self.closes_at_block,
            "claim_expires_at_block": self.claim_expires_at_block,
            "closed_at": None if self.closed_at is None else self.closed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Beam":
        closed_at = data.get("closed_at")
        raw_data = data.get("data")
        return cls(
            creator_address=data.get("creator_address", ""),
            id=data.get("id", ""),
            secret=data.get("secret", ""),
            status=BeamState(int(data.get("status", 0))),
            amount=_coin_from_dict(data.get("amount")) or Coin("", 0),
            funds_withdrawn=bool(data.get("funds_withdrawn", False)),
            claimed=bool(data.get("claimed", False)),
            hide_content=bool(data.get("hide_content", False)),
            cancel_reason=data.get("cancel_reason", ""),
            schema=data.get("schema", ""),
            data=None if raw_data is None else BeamData(dict(raw_data)),
            claim_address=data.get("claim_address", ""),
            closes_at_block=int(data.get("closes_at_block", 0)),
            claim_expires_at_block=int(data.get("claim_expires_at_block", 0)),
            closed_at=None if closed_at is None else datetime.fromisoformat(closed_at),
        )


def _amino_value(value: Any) -> Any:
    if isinstance(value, Coin):
        return {"amount": str(value.amount), "denom": value.denom}
    if isinstance(value, BeamData):
        return value.payload
    if isinstance(value, BeamState):
        return int(value)
    return value


def _sign_bytes(msg_type: str, fields: dict) -> bytes:
    value = {
        k: _amino_value(v)
        for k, v in fields.items()
        if v not in (None, "", 0, False)
    }
    doc = {"type": AMINO_NAMES[msg_type], "value": value}
    return json.dumps(doc, sort_keys=True, separators=(",", ":")).encode()


def _signer(address: str) -> list[bytes]:
    return [address_from_bech32(address)]


def _check_address(address: str) -> None:
    try:
        address_from_bech32(address)
    except InvalidAddressError as exc:
        raise InvalidAddressError(f"Invalid creator address ({exc})") from exc


def _check_amount(amount: Optional[Coin]) -> None:
    if amount is not None and amount.is_negative():
        raise InvalidCoinsError("Invalid amount: must be greater or equal 0")


@dataclass
class MsgOpenBeam:
    id: str = ""
    creator_address: str = ""
    claim_address: str = ""
    amount: Optional[Coin] = None
    secret: str = ""
    schema: str = ""
    data: Optional[BeamData] = None
    closes_at_block: int = 0
    claim_expires_at_block: int = 0

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_OPEN_BEAM

    def get_signers(self) -> list[bytes]:
        return _signer(self.creator_address)

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(self.type(), self.__dict__)

    def validate_basic(self) -> None:
        if not self.id:
            raise InvalidRequestError(f"Invalid id supplied ({len(self.id)})")
        _check_address(self.creator_address)
        if not self.secret:
            raise InvalidRequestError("Invalid secret supplied")
        if self.schema not in (BEAM_SCHEMA_REVIEW, BEAM_SCHEMA_REWARD):
            raise InvalidRequestError("Invalid schema must be review or reward")
        _check_amount(self.amount)


@dataclass
class MsgUpdateBeam:
    updater_address: str = ""
    id: str = ""
    amount: Optional[Coin] = None
    status: BeamState = BeamState.UNSPECIFIED
    data: Optional[BeamData] = None
    cancel_reason: str = ""
    hide_content: bool = False
    closes_at_block: int = 0
    claim_expires_at_block: int = 0
    claim_address: str = ""

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_UPDATE_BEAM

    def get_signers(self) -> list[bytes]:
        return _signer(self.updater_address)

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(self.type(), self.__dict__)

    def validate_basic(self) -> None:
        _check_address(self.updater_address)
        _check_amount(self.amount)


@dataclass
class MsgClaimBeam:
    claimer_address: str = ""
    id: str = ""
    secret: str = ""

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_CLAIM_BEAM

    def get_signers(self) -> list[bytes]:
        return _signer(self.claimer_address)

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(self.type(), self.__dict__)

    def validate_basic(self) -> None:
        _check_address(self.claimer_address)


@dataclass
class BeamGenesisState:
    beams: list = field(default_factory=list)
    module_account_balance: Coin = field(default_factory=lambda: Coin("", 0))

    def validate(self) -> None:
        self.module_account_balance.validate()


def default_genesis() -> BeamGenesisState:
    return BeamGenesisState(beams=[], module_account_balance=Coin(DEFAULT_BEAM_DENOM, 0))


def genesis_from_app_state(app_state: dict) -> BeamGenesisState:
    """Read the beam genesis state from an application state mapping."""
    raw = app_state.get(MODULE_NAME)
    if raw is None:
        return BeamGenesisState()
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return BeamGenesisState(
        beams=[Beam.from_dict(b) for b in data.get("beams") or []],
        module_account_balance=_coin_from_dict(data.get("module_account_balance"))
        or Coin("", 0),
    )