"""Exceptions raised by the order sign helper."""


class OpinionSignError(Exception):
    """Base class for every error raised by this package."""


class InvalidParamError(OpinionSignError, ValueError):
    """A caller-supplied value failed validation."""


class InvalidAmount(InvalidParamError):
    """Amount is non-positive, malformed, or does not fit in a uint256."""


class InvalidPrice(InvalidParamError):
    """Price is unparseable or outside the open interval (0.001, 0.999)."""


class EncodingError(OpinionSignError):
    """ABI packing of a typed-data struct failed."""


class SigningError(OpinionSignError):
    """The private key is malformed or the curve operation failed."""
