"""State keeper of the beam module: storage, queues, state transitions and queries."""

from __future__ import annotations

import json
import logging
from typing import Iterator, Optional, Sequence

from lumchain.beam_errors import (
    BeamAlreadyExistsError,
    BeamInvalidSecretError,
    BeamNotAuthorizedError,
    BeamNotFoundError,
)
from lumchain.beam_keys import (
    ATTRIBUTE_KEY_CLAIMER,
    ATTRIBUTE_KEY_OPENER,
    ATTRIBUTE_KEY_UPDATER,
    BEAMS_PREFIX,
    CLOSED_BEAMS_QUEUE_PREFIX,
    EVENT_TYPE_CLAIM_BEAM,
    EVENT_TYPE_OPEN_BEAM,
    EVENT_TYPE_UPDATE_BEAM,
    MODULE_NAME,
    OPEN_BEAMS_QUEUE_PREFIX,
    QUERY_FETCH_BEAMS,
    QUERY_GET_BEAM,
    STORE_KEY,
    get_beam_id_bytes,
    get_beam_id_from_bytes,
    get_beam_key,
    get_closed_beam_queue_key,
    get_open_beam_queue_key,
    split_closed_beam_queue_key,
    split_open_beam_queue_key,
)
from lumchain.beam_messages import Beam, BeamState, MsgClaimBeam, MsgOpenBeam, MsgUpdateBeam
from lumchain.beam_utils import compare_hash_and_string
from lumchain.ledger import (
    MINTER,
    AccountKeeper,
    BankKeeper,
    Coin,
    Coins,
    Context,
    Event,
    InvalidAddressError,
    InvalidRequestError,
    KVStore,
    ModuleAccount,
    UnauthorizedError,
    UnknownRequestError,
    address_from_bech32,
)

DEFAULT_BOND_DENOM = "stake"
DEFAULT_PAGE_LIMIT = 100


def _parse_address(text: str, message: str = "invalid address") -> bytes:
    try:
        return address_from_bech32(text)
    except InvalidAddressError as exc:
        raise InvalidAddressError(message) from exc


def _encode(beam: Beam) -> bytes:
    return json.dumps(beam.to_dict(), sort_keys=True).encode()


def _decode(raw: bytes) -> Beam:
    return Beam.from_dict(json.loads(raw))


class BeamKeeper:
    """Reads and writes beams and moves their funds."""

    def __init__(
        self,
        account_keeper: AccountKeeper,
        bank_keeper: BankKeeper,
        bond_denom: str = DEFAULT_BOND_DENOM,
        store_key: str = STORE_KEY,
    ):
        self.account_keeper = account_keeper
        self.bank_keeper = bank_keeper
        self.bond_denom = bond_denom
        self.store_key = store_key
        self.logger = logging.getLogger(f"lumchain.x.{MODULE_NAME}")
        if account_keeper.get_module_account(MODULE_NAME) is None:
            account_keeper.set_module_account(
                ModuleAccount(name=MODULE_NAME, permissions=(MINTER,))
            )

    def _store(self, ctx: Context) -> KVStore:
        return ctx.stores.setdefault(self.store_key, KVStore())

    # Module account

    def get_beam_account(self) -> bytes:
        return self.account_keeper.get_module_address(MODULE_NAME)

    def create_beam_module_account(self, ctx: Context, amount: Coin) -> None:
        """Create the module account and mint the given amount into it."""
        self.account_keeper.set_module_account(
            ModuleAccount(name=MODULE_NAME, permissions=(MINTER,))
        )
        self.bank_keeper.mint_coins(MODULE_NAME, Coins([amount]))

    def get_beam_account_balance(self, ctx: Context) -> Coin:
        return self.bank_keeper.get_balance(self.get_beam_account(), self.bond_denom)

    def _move_coins_to_module_account(self, account: bytes, amount: Coin) -> None:
        self.bank_keeper.send_coins_from_account_to_module(account, MODULE_NAME, Coins([amount]))

    def _move_coins_to_account(self, account: bytes, amount: Coin) -> None:
        self.bank_keeper.send_coins_from_module_to_account(MODULE_NAME, account, Coins([amount]))

    # Queues

    def insert_open_beam_queue(self, ctx: Context, beam_id: str) -> None:
        self._store(ctx).set(get_open_beam_queue_key(beam_id), get_beam_id_bytes(beam_id))

    def remove_from_open_beam_queue(self, ctx: Context, beam_id: str) -> None:
        self._store(ctx).delete(get_open_beam_queue_key(beam_id))

    def insert_closed_beam_queue(self, ctx: Context, beam_id: str) -> None:
        self._store(ctx).set(get_closed_beam_queue_key(beam_id), get_beam_id_bytes(beam_id))

    def remove_from_closed_beam_queue(self, ctx: Context, beam_id: str) -> None:
        self._store(ctx).delete(get_closed_beam_queue_key(beam_id))

    # Beams

    def get_beam(self, ctx: Context, beam_id: str) -> Beam:
        raw = self._store(ctx).get(get_beam_key(beam_id))
        if raw is None:
            raise BeamNotFoundError(f"beam not found: {beam_id}")
        return _decode(raw)

    def list_beams(self, ctx: Context) -> list[Beam]:
        return list(self.iter_beams(ctx))

    def has_beam(self, ctx: Context, beam_id: str) -> bool:
        return self._store(ctx).has(get_beam_key(beam_id))

    def set_beam(self, ctx: Context, beam_id: str, beam: Beam) -> None:
        self._store(ctx).set(get_beam_key(beam_id), _encode(beam))

    def open_beam(self, ctx: Context, msg: MsgOpenBeam) -> None:
        """Create a new beam, escrowing its amount in the module account."""
        if self.has_beam(ctx, msg.id):
            raise BeamAlreadyExistsError()

        beam = Beam(
            creator_address=msg.creator_address,
            id=msg.id,
            secret=msg.secret,
            status=BeamState.OPEN,
            amount=Coin(self.bond_denom, 0),
            schema=msg.schema,
            data=msg.data,
        )
        has_amount = msg.amount is not None and msg.amount.is_positive()
        if has_amount:
            beam.amount = msg.amount
        if msg.claim_address:
            beam.claim_address = msg.claim_address
            beam.claimed = True
        if msg.closes_at_block > 0:
            beam.closes_at_block = msg.closes_at_block
        if msg.claim_expires_at_block > 0:
            beam.claim_expires_at_block = msg.claim_expires_at_block

        if has_amount:
            creator = _parse_address(msg.creator_address)
            self._move_coins_to_module_account(creator, msg.amount)

        self.set_beam(ctx, beam.id, beam)
        self.insert_open_beam_queue(ctx, beam.id)
        ctx.emit_event(
            Event(EVENT_TYPE_OPEN_BEAM, ((ATTRIBUTE_KEY_OPENER, msg.creator_address),))
        )

    def update_beam_status(self, ctx: Context, beam_id: str, new_status: BeamState) -> None:
        """Close or cancel a beam without authorization checks."""
        beam = self.get_beam(ctx, beam_id)

        if new_status == BeamState.CLOSED:
            beam.status = BeamState.CLOSED
            beam.closed_at = ctx.block_time
            if beam.claimed and not beam.funds_withdrawn:
                claimer = _parse_address(beam.claim_address)
                self._move_coins_to_account(claimer, beam.amount)
                beam.funds_withdrawn = True
            self.remove_from_open_beam_queue(ctx, beam.id)
            self.insert_closed_beam_queue(ctx, beam.id)
        elif new_status == BeamState.CANCELED:
            beam.status = BeamState.CANCELED
            beam.closed_at = ctx.block_time
            creator = _parse_address(beam.creator_address, "Cannot acquire creator address")
            self._move_coins_to_account(creator, beam.amount)
            self.remove_from_open_beam_queue(ctx, beam.id)
            self.insert_closed_beam_queue(ctx, beam.id)

        self.set_beam(ctx, beam.id, beam)

    def update_beam(self, ctx: Context, msg: MsgUpdateBeam) -> None:
        """Apply an update from the beam creator, then any requested status change."""
        if not self.has_beam(ctx, msg.id):
            raise BeamNotFoundError()
        beam = self.get_beam(ctx, msg.id)

        if beam.status != BeamState.OPEN:
            raise InvalidRequestError("Beam is closed and thus cannot be updated")
        if beam.creator_address != msg.updater_address:
            raise BeamNotAuthorizedError()

        if msg.data is not None:
            beam.data = msg.data
        if msg.amount is not None and msg.amount.is_positive():
            updater = _parse_address(msg.updater_address)
            self._move_coins_to_module_account(updater, msg.amount)
            beam.amount = beam.amount.add(msg.amount)
        if msg.claim_address:
            beam.claim_address = msg.claim_address
            beam.claimed = True
        if msg.closes_at_block > 0:
            beam.closes_at_block = msg.closes_at_block
        if msg.claim_expires_at_block > 0:
            beam.claim_expires_at_block = msg.claim_expires_at_block
        beam.hide_content = msg.hide_content
        beam.cancel_reason = msg.cancel_reason
        self.set_beam(ctx, beam.id, beam)

        if msg.status != BeamState.UNSPECIFIED:
            self.update_beam_status(ctx, beam.id, msg.status)

        ctx.emit_event(
            Event(EVENT_TYPE_UPDATE_BEAM, ((ATTRIBUTE_KEY_UPDATER, msg.updater_address),))
        )

    def claim_beam(self, ctx: Context, msg: MsgClaimBeam) -> None:
        """Claim a beam with its secret; funds move only once the beam is closed."""
        if not self.has_beam(ctx, msg.id):
            raise BeamNotFoundError()
        beam = self.get_beam(ctx, msg.id)

        if beam.claimed:
            raise UnauthorizedError("Beam is already claimed")
        if not compare_hash_and_string(beam.secret, msg.secret):
            raise BeamInvalidSecretError()

        claimer = _parse_address(msg.claimer_address)
        if (
            beam.status == BeamState.CLOSED
            and not beam.funds_withdrawn
            and beam.amount.is_positive()
        ):
            self._move_coins_to_account(claimer, beam.amount)
            beam.funds_withdrawn = True

        beam.claimed = True
        beam.claim_address = msg.claimer_address
        self.set_beam(ctx, msg.id, beam)
        ctx.emit_event(
            Event(EVENT_TYPE_CLAIM_BEAM, ((ATTRIBUTE_KEY_CLAIMER, msg.claimer_address),))
        )

    # Iteration

    def iter_beams(self, ctx: Context) -> Iterator[Beam]:
        for _, raw in self._store(ctx).iterate_prefix(BEAMS_PREFIX):
            yield _decode(raw)

    def iter_open_beams(self, ctx: Context) -> Iterator[Beam]:
        for key, _ in self._store(ctx).iterate_prefix(OPEN_BEAMS_QUEUE_PREFIX):
            yield self.get_beam(ctx, get_beam_id_from_bytes(split_open_beam_queue_key(key)))

    def iter_closed_beams(self, ctx: Context) -> Iterator[Beam]:
        for key, _ in self._store(ctx).iterate_prefix(CLOSED_BEAMS_QUEUE_PREFIX):
            yield self.get_beam(ctx, get_beam_id_from_bytes(split_closed_beam_queue_key(key)))

    def open_queue_ids(self, ctx: Context) -> list[str]:
        store = self._store(ctx)
        return [get_beam_id_from_bytes(v) for _, v in store.iterate_prefix(OPEN_BEAMS_QUEUE_PREFIX)]

    def closed_queue_ids(self, ctx: Context) -> list[str]:
        store = self._store(ctx)
        return [
            get_beam_id_from_bytes(v) for _, v in store.iterate_prefix(CLOSED_BEAMS_QUEUE_PREFIX)
        ]

    # Queries

    def query_beams(self, ctx: Context, offset: int = 0, limit: int = 0) -> tuple[list[Beam], int]:
        """Return one page of beams and the total number of beams."""
        if offset < 0 or limit < 0:
            raise InvalidRequestError("offset and limit must not be negative")
        limit = limit or DEFAULT_PAGE_LIMIT
        beams = self.list_beams(ctx)
        return beams[offset:offset + limit], len(beams)

    def query_beam(self, ctx: Context, beam_id: str) -> Beam:
        try:
            return self.get_beam(ctx, beam_id)
        except BeamNotFoundError as exc:
            raise BeamNotFoundError() from exc

    def legacy_query(self, ctx: Context, path: Sequence[str]) -> bytes:
        """Answer a path-routed query with indented JSON."""
        endpoint: Optional[str] = path[0] if path else ""
        if endpoint == QUERY_FETCH_BEAMS:
            payload = [beam.to_dict() for beam in self.list_beams(ctx)]
        elif endpoint == QUERY_GET_BEAM:
            if len(path) < 2:
                raise InvalidRequestError("missing beam id")
            payload = self.get_beam(ctx, path[1]).to_dict()
        else:
            raise UnknownRequestError(f"unknown {MODULE_NAME} query endpoint: {endpoint}")
        return json.dumps(payload, indent=2).encode()