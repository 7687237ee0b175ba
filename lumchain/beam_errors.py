"""Errors raised by the beam module."""

from lumchain.ledger import ChainError


class BeamError(ChainError):
    """beam error"""

    codespace = "beam"


class BeamNotFoundError(BeamError):
    """Beam does not exists"""

    code = 1100


class BeamNotAuthorizedError(BeamError):
    """This beam does not belong to you"""

    code = 1101


class BeamInvalidSecretError(BeamError):
    """Invalid secret provided"""

    code = 1102


class BeamAlreadyExistsError(BeamError):
    """This beam ID already exists"""

    code = 1103