# lumchain

State-machine logic for two ledger modules, running over a small in-memory
chain state:

- **beam** – escrowed payments. A creator opens a beam with funds and a
  hashed secret. Someone who knows the secret claims it, and the funds are
  released when the beam is closed. A beam can also be cancelled, which
  refunds the creator, or closed on its own at a given block height.
- **airdrop** – claim records that unlock coins when a user votes or
  delegates. Each claim is split into a free part and a vested part. The
  amount decays linearly once a set period has passed, and whatever is left
  at the end goes to the community pool.

The package has no runtime dependencies.

## Installing

```
pip install .
pip install ".[test]"   # adds pytest
```

## Building blocks

`lumchain.ledger` holds the shared pieces:

- `Coin` and `Coins` for amounts, and `parse_coin` to read them from text.
- `address_to_bech32` and `address_from_bech32` for addresses.
- `KVStore` and `Context`, which carries the block height and time and
  collects emitted `Event`s.
- The keepers `AccountKeeper`, `BankKeeper` and `DistributionKeeper`.
- The `ChainError` family of exceptions.

## Beams

```python
from lumchain.ledger import Context, AccountKeeper, BankKeeper
from lumchain.beam_keeper import BeamKeeper
from lumchain.beam_messages import MsgOpenBeam, MsgClaimBeam
from lumchain.beam_utils import generate_hash_from_string
```

Beams, states and messages live in `lumchain.beam_messages`:
`BeamState`, `BeamData`, `Beam`, `MsgOpenBeam`, `MsgUpdateBeam`,
`MsgClaimBeam` and `BeamGenesisState`.

`BeamKeeper` provides the operations: `open_beam`, `update_beam`,
`claim_beam`, `get_beam` and `list_beams`.

`lumchain.beam_abci` provides `end_blocker`, `init_genesis`,
`export_genesis` and `handle_message`. The end blocker cancels beams whose
`closes_at_block` matches the current height.

A wrong secret raises `BeamInvalidSecretError`, and an unknown id raises
`BeamNotFoundError`. Both are in `lumchain.beam_errors`.

## Airdrop

`lumchain.airdrop_types` defines `Action`, `ClaimRecord`,
`AirdropParams` and `AirdropGenesisState`.

`AirdropKeeper` in `lumchain.airdrop_keeper` provides:

- `get_claimable_amount_for_action`, which returns a free coin and a
  vested coin.
- `get_user_total_claimable`.
- `claim_coins_for_action`.
- The hooks `after_proposal_vote` and `after_delegation_modified`.
- `end_airdrop`.

Queries are in `lumchain.airdrop_query`. The balance-repair migration is in
`lumchain.airdrop_migrations`, as `migrate_module_balance` and
`Migrator.migrate_2_to_3`.

## Running the tests

```
pytest
```