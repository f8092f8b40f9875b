"""
Order and domain data structures.

An ``Order`` mirrors the exchange contract's Order struct field for field.
Instances are frozen: once an order has been hashed, changing any field
would invalidate the signature, so "changing" an order means building a
new one with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Type, Union

from eth_utils import (
    is_address,
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

from .exceptions import InvalidAmount, InvalidParamError

UINT256_MAX = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

IntLike = Union[int, str]


class Side(IntEnum):
    """Order side, encoded as uint8."""
    BUY = 0
    SELL = 1


class SignatureType(IntEnum):
    """How the exchange contract validates the signature, encoded as uint8."""
    EOA = 0
    POLY_GNOSIS_SAFE = 1
    POLY_PROXY = 2


class OrderType(IntEnum):
    """Trading method sent alongside the order."""
    MARKET = 1
    LIMIT = 2


def to_uint256(name: str, value: IntLike) -> int:
    """Coerce an int or decimal digit string into a uint256, or raise."""
    error_cls = InvalidAmount if name in ("makerAmount", "takerAmount") else InvalidParamError
    if isinstance(value, bool):
        raise error_cls(f"{name} must be an integer, got bool")
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise error_cls(f"{name} must be a decimal integer string, got: {value!r}")
        value = int(text)
    if not isinstance(value, int):
        raise error_cls(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise error_cls(f"{name} out of uint256 range: {value}")
    return value


def to_enum(enum_cls: Type[IntEnum], name: str, value: Any) -> IntEnum:
    """Coerce an int or decimal digit string into a member of ``enum_cls``, or raise."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidParamError(f"invalid {name}: {value!r}")
    try:
        return enum_cls(int(value))
    except (TypeError, ValueError, OverflowError):
        raise InvalidParamError(f"invalid {name}: {value!r}")


def normalize_address(name: str, value: Union[str, bytes]) -> str:
    """Return the EIP-55 checksum form of ``value``."""
    if not is_address(value):
        raise InvalidParamError(f"{name} is not a valid address: {value!r}")
    # Mixed case means the caller claims EIP-55; the checksum must then hold.
    if is_checksum_formatted_address(value) and not is_checksum_address(value):
        raise InvalidParamError(f"{name} is not a valid address (bad checksum): {value!r}")
    return to_checksum_address(value)


@dataclass(frozen=True)
class EIP712Domain:
    """Chain and contract binding for the order signature."""

    name: str
    version: str
    chainId: int
    verifyingContract: str

    def __post_init__(self):
        object.__setattr__(self, "chainId", to_uint256("chainId", self.chainId))
        object.__setattr__(
            self, "verifyingContract",
            normalize_address("verifyingContract", self.verifyingContract),
        )

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


@dataclass(frozen=True)
class Order:
    """
    The signed unit of exchange intent.

    Field order is the contract's struct order and must not change.
    Integer fields accept ints or decimal strings; addresses are stored
    in checksum form.
    """

    salt: int
    maker: str
    signer: str
    taker: str
    tokenId: int
    makerAmount: int
    takerAmount: int
    expiration: int
    nonce: int
    feeRateBps: int
    side: Side
    signatureType: SignatureType

    def __post_init__(self):
        for name in ("salt", "tokenId", "makerAmount", "takerAmount",
                     "expiration", "nonce", "feeRateBps"):
            object.__setattr__(self, name, to_uint256(name, getattr(self, name)))
        for name in ("maker", "signer", "taker"):
            object.__setattr__(self, name, normalize_address(name, getattr(self, name)))
        object.__setattr__(self, "side", to_enum(Side, "side", self.side))
        object.__setattr__(self, "signatureType",
                           to_enum(SignatureType, "signatureType", self.signatureType))

    def to_payload(self) -> Dict[str, str]:
        """Flat string field set used by the order submission API."""
        return {
            "salt": str(self.salt),
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": str(self.tokenId),
            "makerAmount": str(self.makerAmount),
            "takerAmount": str(self.takerAmount),
            "expiration": str(self.expiration),
            "nonce": str(self.nonce),
            "feeRateBps": str(self.feeRateBps),
            "side": str(int(self.side)),
            "signatureType": str(int(self.signatureType)),
        }


@dataclass
class OrderData:
    """Caller-side input to ``OrderBuilder.build_order``; optional fields get defaults."""

    maker: str
    tokenId: IntLike
    makerAmount: IntLike
    takerAmount: IntLike
    side: Side
    taker: str = ZERO_ADDRESS
    signer: Optional[str] = None
    expiration: IntLike = 0
    nonce: IntLike = 0
    feeRateBps: IntLike = 0
    signatureType: SignatureType = SignatureType.EOA


@dataclass(frozen=True)
class SignedOrder:
    """An order together with its ``0x``-prefixed 65-byte signature."""

    order: Order
    signature: str

    def to_payload(self) -> Dict[str, Any]:
        payload = self.order.to_payload()
        payload["signature"] = self.signature
        return payload
