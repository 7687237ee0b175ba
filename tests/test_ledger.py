from datetime import datetime, timezone

import pytest

from lumchain.ledger import (
    MINTER,
    AccountKeeper,
    BankKeeper,
    Coin,
    Coins,
    Context,
    ContinuousVestingAccount,
    DistributionKeeper,
    Event,
    InsufficientFundsError,
    InvalidAddressError,
    InvalidCoinsError,
    KVStore,
    ModuleAccount,
    UnknownRequestError,
    address_from_bech32,
    address_to_bech32,
    parse_coin,
)


def test_coin_string_and_parse_round_trip():
    coin = Coin("stake", 100)
    assert str(coin) == "100stake"
    assert parse_coin(str(coin)) == coin


def test_parse_coin_rejects_garbage():
    with pytest.raises(InvalidCoinsError):
        parse_coin("stake100")


def test_coin_validate_and_mismatch():
    with pytest.raises(InvalidCoinsError):
        Coin("stake", -1).validate()
    with pytest.raises(InvalidCoinsError):
        Coin("x", 1).validate()
    with pytest.raises(InvalidCoinsError):
        Coin("stake", 1).add(Coin("ulum", 1))
    with pytest.raises(InsufficientFundsError):
        Coin("stake", 1).sub(Coin("stake", 2))


def test_coins_merge_sort_and_drop_zero():
    coins = Coins([Coin("ulum", 1), Coin("stake", 2), Coin("ulum", 3), Coin("zzz", 0)])
    assert [c.denom for c in coins] == ["stake", "ulum"]
    assert coins.amount_of("ulum") == 1 + 3
    assert coins.amount_of("zzz") == 0
    assert Coins().is_empty()


def test_coins_add_sub_round_trip():
    base = Coins([Coin("stake", 10)])
    extra = Coin("ulum", 5)
    assert base.add(extra).sub(extra) == base
    with pytest.raises(InsufficientFundsError):
        base.sub(Coins([Coin("stake", 11)]))


def test_bech32_round_trip_and_errors():
    raw = b"addr1---------------"
    text = address_to_bech32(raw, "lum")
    assert text.startswith("lum1")
    assert address_from_bech32(text, "lum") == raw
    with pytest.raises(InvalidAddressError):
        address_from_bech32(text, "cosmos")
    corrupted = text[:-1] + ("q" if text[-1] != "q" else "p")
    with pytest.raises(InvalidAddressError):
        address_from_bech32(corrupted, "lum")
    with pytest.raises(InvalidAddressError):
        address_from_bech32("", "lum")


def test_kvstore_prefix_iteration():
    store = KVStore()
    store.set(b"\x02b", b"2")
    store.set(b"\x01b", b"b")
    store.set(b"\x01a", b"a")
    assert [k for k, _ in store.iterate_prefix(b"\x01")] == [b"\x01a", b"\x01b"]
    store.delete(b"\x01a")
    assert not store.has(b"\x01a")
    assert store.get(b"\x02b") == b"2"


def test_context_copies_share_events():
    ctx = Context()
    later = ctx.with_block_time(datetime(2022, 1, 1, tzinfo=timezone.utc)).with_block_height(7)
    later.emit_event(Event("x"))
    assert ctx.events == [Event("x")]
    assert later.block_height == 7 and ctx.block_height == 0


def _bank():
    accounts = AccountKeeper()
    accounts.set_module_account(ModuleAccount(name="mint", permissions=(MINTER,)))
    return accounts, BankKeeper(accounts)


def test_mint_and_send_preserve_supply():
    accounts, bank = _bank()
    bank.mint_coins("mint", Coins([Coin("stake", 60)]))
    user = b"user----------------"
    bank.send_coins_from_module_to_account("mint", user, Coins([Coin("stake", 10)]))
    assert bank.get_balance(user, "stake") == Coin("stake", 10)
    assert bank.get_supply("stake") == Coin("stake", 60)
    with pytest.raises(UnknownRequestError):
        bank.mint_coins("missing", Coins([Coin("stake", 1)]))


def test_vesting_coins_are_locked():
    accounts, bank = _bank()
    user = b"vest----------------"
    accounts.set_account(
        ContinuousVestingAccount(address=user, original_vesting=Coins([Coin("stake", 7)]))
    )
    bank.mint_coins("mint", Coins([Coin("stake", 10)]))
    bank.send_coins_from_module_to_account("mint", user, Coins([Coin("stake", 10)]))
    with pytest.raises(InsufficientFundsError):
        bank.send_coins(user, b"other---------------", Coins([Coin("stake", 10)]))
    bank.send_coins(user, b"other---------------", Coins([Coin("stake", 3)]))
    assert bank.get_balance(b"other---------------", "stake").amount == 3


def test_fund_community_pool():
    accounts, bank = _bank()
    bank.mint_coins("mint", Coins([Coin("stake", 5)]))
    distr = DistributionKeeper(bank)
    sender = accounts.get_module_address("mint")
    distr.fund_community_pool(Coins([Coin("stake", 5)]), sender)
    assert distr.community_pool().amount_of("stake") == 5
    assert bank.get_balance(sender, "stake").is_zero()