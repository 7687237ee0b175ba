"""Minimal ledger primitives: coins, addresses, key-value stores and keepers."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Union

ADDRESS_PREFIX = "lum"
MINTER = "minter"

_DENOM_RE = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_COIN_RE = re.compile(rf"^\s*([0-9]+)\s*({_DENOM_RE})\s*$")
_DENOM_ONLY_RE = re.compile(rf"^{_DENOM_RE}$")


class ChainError(Exception):
    """Base error of the ledger, carrying a codespace and a code."""

    codespace = "sdk"
    code = 1

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or "")


class InvalidAddressError(ChainError):
    """invalid address"""

    code = 7


class InvalidRequestError(ChainError):
    """invalid request"""

    code = 18


class UnauthorizedError(ChainError):
    """unauthorized"""

    code = 4


class InsufficientFundsError(ChainError):
    """insufficient funds"""

    code = 5


class InvalidCoinsError(ChainError):
    """invalid coins"""

    code = 10


class UnknownRequestError(ChainError):
    """unknown request"""

    code = 6


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination."""

    denom: str
    amount: int = 0

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def validate(self) -> None:
        if not _DENOM_ONLY_RE.match(self.denom):
            raise InvalidCoinsError(f"invalid denom: {self.denom}")
        if self.amount < 0:
            raise InvalidCoinsError(f"negative coin amount: {self.amount}")

    def _check_denom(self, other: "Coin") -> None:
        if other.denom != self.denom:
            raise InvalidCoinsError(
                f"invalid coin denominations; {self.denom}, {other.denom}"
            )

    def add(self, other: "Coin") -> "Coin":
        self._check_denom(other)
        return Coin(self.denom, self.amount + other.amount)

    def sub(self, other: "Coin") -> "Coin":
        self._check_denom(other)
        result = Coin(self.denom, self.amount - other.amount)
        if result.is_negative():
            raise InsufficientFundsError("negative coin amount")
        return result


class Coins:
    """A sorted set of coins with distinct denominations and no zero entries."""

    def __init__(self, coins: Iterable[Coin] = ()):
        totals: dict[str, int] = {}
        for coin in coins:
            totals[coin.denom] = totals.get(coin.denom, 0) + coin.amount
        self._coins = tuple(
            Coin(denom, amount) for denom, amount in sorted(totals.items()) if amount != 0
        )

    def __iter__(self) -> Iterator[Coin]:
        return iter(self._coins)

    def __len__(self) -> int:
        return len(self._coins)

    def __getitem__(self, index: int) -> Coin:
        return self._coins[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Coins):
            return NotImplemented
        return self._coins == other._coins

    def __repr__(self) -> str:
        return f"Coins({list(self._coins)!r})"

    def __str__(self) -> str:
        return ",".join(str(c) for c in self._coins)

    def add(self, *args: Union[Coin, "Coins"]) -> "Coins":
        extra: list[Coin] = []
        for arg in args:
            extra.extend([arg] if isinstance(arg, Coin) else list(arg))
        return Coins([*self._coins, *extra])

    def sub(self, other: Union[Coin, "Coins"]) -> "Coins":
        others = [other] if isinstance(other, Coin) else list(other)
        result = Coins([*self._coins, *(Coin(c.denom, -c.amount) for c in others)])
        if any(c.is_negative() for c in result):
            raise InsufficientFundsError(f"{self} is smaller than {Coins(others)}")
        return result

    def amount_of(self, denom: str) -> int:
        return next((c.amount for c in self._coins if c.denom == denom), 0)

    def is_empty(self) -> bool:
        return not self._coins


def parse_coin(text: str) -> Coin:
    """Parse a coin written as '<amount><denom>'."""
    match = _COIN_RE.match(text)
    if not match:
        raise InvalidCoinsError(f"invalid decimal coin expression: {text}")
    return Coin(match.group(2), int(match.group(1)))


_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"


def _polymod(values: Iterable[int]) -> int:
    gen = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, g in enumerate(gen):
            if (top >> i) & 1:
                chk ^= g
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise InvalidAddressError("invalid padding in address data")
    return out


def address_to_bech32(raw: bytes, prefix: str = ADDRESS_PREFIX) -> str:
    """Encode raw address bytes with the given human readable prefix."""
    data = _convert_bits(raw, 8, 5, True)
    poly = _polymod(_hrp_expand(prefix) + data + [0] * 6) ^ 1
    checksum = [(poly >> 5 * (5 - i)) & 31 for i in range(6)]
    return prefix + "1" + "".join(_CHARSET[d] for d in data + checksum)


def address_from_bech32(text: str, prefix: str = ADDRESS_PREFIX) -> bytes:
    """Decode a bech32 address, checking its prefix and checksum."""
    if not text.strip():
        raise InvalidAddressError("empty address string is not allowed")
    if text.lower() != text and text.upper() != text:
        raise InvalidAddressError("mixed case address")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise InvalidAddressError(f"invalid bech32 string: {text}")
    hrp, payload = text[:pos], text[pos + 1:]
    if any(c not in _CHARSET for c in payload):
        raise InvalidAddressError("invalid character in address")
    data = [_CHARSET.index(c) for c in payload]
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise InvalidAddressError("invalid checksum")
    if hrp != prefix:
        raise InvalidAddressError(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
    raw = bytes(_convert_bits(data[:-6], 5, 8, False))
    if not 0 < len(raw) <= 255:
        raise InvalidAddressError("invalid address length")
    return raw


class KVStore:
    """An ordered byte key-value store."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._data

    def iterate_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """Yield (key, value) pairs under prefix in key order; safe against deletion."""
        items = sorted((k, v) for k, v in self._data.items() if k.startswith(prefix))
        yield from items


@dataclass(frozen=True)
class Event:
    type: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass
class Context:
    """Execution context of a block: time, height, stores and emitted events."""

    block_time: datetime = field(default_factory=lambda: datetime(1970, 1, 1, tzinfo=timezone.utc))
    block_height: int = 0
    stores: dict = field(default_factory=dict)
    events: list = field(default_factory=list)

    def with_block_time(self, block_time: datetime) -> "Context":
        return replace(self, block_time=block_time)

    def with_block_height(self, height: int) -> "Context":
        return replace(self, block_height=height)

    def emit_event(self, event: Event) -> None:
        self.events.append(event)


@dataclass
class BaseAccount:
    address: bytes = b""
    account_number: int = 0
    sequence: int = 0


@dataclass
class ContinuousVestingAccount(BaseAccount):
    original_vesting: Coins = field(default_factory=Coins)
    start_time: int = 0
    end_time: int = 0


@dataclass
class ModuleAccount(BaseAccount):
    name: str = ""
    permissions: tuple[str, ...] = ()


class AccountKeeper:
    """Holds accounts by address."""

    def __init__(self) -> None:
        self._accounts: dict[bytes, BaseAccount] = {}

    def get_account(self, address: bytes) -> Optional[BaseAccount]:
        return self._accounts.get(bytes(address))

    def set_account(self, account: BaseAccount) -> None:
        self._accounts[bytes(account.address)] = account

    def get_module_address(self, name: str) -> bytes:
        return hashlib.sha256(name.encode()).digest()[:20]

    def get_module_account(self, name: str) -> Optional[ModuleAccount]:
        account = self._accounts.get(self.get_module_address(name))
        return account if isinstance(account, ModuleAccount) else None

    def set_module_account(self, account: ModuleAccount) -> None:
        if not account.address:
            account.address = self.get_module_address(account.name)
        self.set_account(account)


class BankKeeper:
    """Balances and supply, with vesting coins locked from spending."""

    def __init__(self, account_keeper: AccountKeeper):
        self.account_keeper = account_keeper
        self._balances: dict[bytes, Coins] = {}
        self._supply = Coins()

    def get_balance(self, address: bytes, denom: str) -> Coin:
        return Coin(denom, self.get_all_balances(address).amount_of(denom))

    def get_all_balances(self, address: bytes) -> Coins:
        return self._balances.get(bytes(address), Coins())

    def get_supply(self, denom: str) -> Coin:
        return Coin(denom, self._supply.amount_of(denom))

    def _module_address(self, module: str) -> bytes:
        account = self.account_keeper.get_module_account(module)
        if account is None:
            raise UnknownRequestError(f"module account {module} does not exist")
        return account.address

    def _spendable(self, address: bytes) -> Coins:
        balance = self.get_all_balances(address)
        account = self.account_keeper.get_account(address)
        if not isinstance(account, ContinuousVestingAccount):
            return balance
        return Coins(
            Coin(c.denom, max(0, c.amount - account.original_vesting.amount_of(c.denom)))
            for c in balance
        )

    def mint_coins(self, module: str, coins: Coins) -> None:
        account = self.account_keeper.get_module_account(module)
        if account is None:
            raise UnknownRequestError(f"module account {module} does not exist")
        if MINTER not in account.permissions:
            raise UnauthorizedError(f"module account {module} does not have permissions to mint tokens")
        coins = Coins(coins)
        self._balances[account.address] = self.get_all_balances(account.address).add(coins)
        self._supply = self._supply.add(coins)

    def send_coins(self, sender: bytes, recipient: bytes, coins: Coins) -> None:
        coins = Coins(coins)
        sender, recipient = bytes(sender), bytes(recipient)
        try:
            self._spendable(sender).sub(coins)
        except InsufficientFundsError as exc:
            raise InsufficientFundsError(f"insufficient funds: {exc}") from exc
        self._balances[sender] = self.get_all_balances(sender).sub(coins)
        self._balances[recipient] = self.get_all_balances(recipient).add(coins)
        if self.account_keeper.get_account(recipient) is None:
            self.account_keeper.set_account(BaseAccount(address=recipient))

    def send_coins_from_module_to_account(self, module: str, recipient: bytes, coins: Coins) -> None:
        self.send_coins(self._module_address(module), recipient, coins)

    def send_coins_from_account_to_module(self, sender: bytes, module: str, coins: Coins) -> None:
        if self.account_keeper.get_module_account(module) is None:
            self.account_keeper.set_module_account(ModuleAccount(name=module))
        self.send_coins(sender, self._module_address(module), coins)


class DistributionKeeper:
    """Keeps the community pool."""

    MODULE_NAME = "distribution"

    def __init__(self, bank_keeper: BankKeeper):
        self.bank_keeper = bank_keeper
        self._pool = Coins()

    def fund_community_pool(self, coins: Coins, sender: bytes) -> None:
        coins = Coins(coins)
        self.bank_keeper.send_coins_from_account_to_module(sender, self.MODULE_NAME, coins)
        self._pool = self._pool.add(coins)

    def community_pool(self) -> Coins:
        return self._pool