import pytest

from lumchain.beam_errors import (
    BeamAlreadyExistsError,
    BeamError,
    BeamInvalidSecretError,
    BeamNotAuthorizedError,
    BeamNotFoundError,
)
from lumchain.ledger import ChainError


@pytest.mark.parametrize(
    "cls, code",
    [
        (BeamNotFoundError, 1100),
        (BeamNotAuthorizedError, 1101),
        (BeamInvalidSecretError, 1102),
        (BeamAlreadyExistsError, 1103),
    ],
)
def test_codes(cls, code):
    assert cls.code == code
    assert cls.codespace == "beam"


def test_default_message_and_hierarchy():
    error = BeamNotFoundError()
    assert str(error) == "Beam does not exists"
    assert isinstance(error, BeamError)
    assert isinstance(error, ChainError)
    assert error.code == 1100