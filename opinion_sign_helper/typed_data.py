"""
EIP-712 hashing for exchange orders.

The two type strings below are part of the on-chain protocol. They must
match the contract byte for byte (no spaces after commas, same field
names, same order), otherwise every signature is rejected.
"""

import logging
from typing import Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import keccak

from .exceptions import EncodingError
from .types import EIP712Domain, Order

logger = logging.getLogger(__name__)

EIP712_DOMAIN_NAME = "OPINION CTF Exchange"
EIP712_DOMAIN_VERSION = "1"

EIP712_DOMAIN_TYPE_STRING = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
ORDER_TYPE_STRING = (
    "Order(uint256 salt,address maker,address signer,address taker,uint256 tokenId,"
    "uint256 makerAmount,uint256 takerAmount,uint256 expiration,uint256 nonce,"
    "uint256 feeRateBps,uint8 side,uint8 signatureType)"
)

EIP712_DOMAIN_TYPEHASH = keccak(text=EIP712_DOMAIN_TYPE_STRING)
ORDER_TYPEHASH = keccak(text=ORDER_TYPE_STRING)

EIP712_PREFIX = b"\x19\x01"

_DOMAIN_ABI_TYPES = ["bytes32", "bytes32", "bytes32", "uint256", "address"]
_ORDER_ABI_TYPES = [
    "bytes32",  # typeHash
    "uint256",  # salt
    "address",  # maker
    "address",  # signer
    "address",  # taker
    "uint256",  # tokenId
    "uint256",  # makerAmount
    "uint256",  # takerAmount
    "uint256",  # expiration
    "uint256",  # nonce
    "uint256",  # feeRateBps
    "uint8",    # side
    "uint8",    # signatureType
]


def abi_encode(types: Sequence[str], values: Sequence) -> bytes:
    """ABI-encode static values into consecutive 32-byte slots."""
    if len(types) != len(values):
        raise EncodingError(f"expected {len(types)} values, got {len(values)}")
    try:
        return encode(list(types), list(values))
    except (AbiEncodingError, TypeError, ValueError) as e:
        raise EncodingError(f"failed to ABI-encode {list(types)}: {e}") from e


def domain_separator(domain: EIP712Domain) -> bytes:
    """keccak256(typeHash ++ keccak(name) ++ keccak(version) ++ chainId ++ verifyingContract)."""
    encoded = abi_encode(_DOMAIN_ABI_TYPES, [
        EIP712_DOMAIN_TYPEHASH,
        keccak(text=domain.name),
        keccak(text=domain.version),
        domain.chainId,
        domain.verifyingContract,
    ])
    return keccak(encoded)


def struct_hash(order: Order) -> bytes:
    """keccak256 of ORDER_TYPEHASH followed by the 12 order fields in struct order."""
    encoded = abi_encode(_ORDER_ABI_TYPES, [
        ORDER_TYPEHASH,
        order.salt,
        order.maker,
        order.signer,
        order.taker,
        order.tokenId,
        order.makerAmount,
        order.takerAmount,
        order.expiration,
        order.nonce,
        order.feeRateBps,
        int(order.side),
        int(order.signatureType),
    ])
    return keccak(encoded)


def sign_hash(domain: EIP712Domain, order: Order) -> bytes:
    """The digest that actually gets signed: keccak256(0x1901 ++ domainSeparator ++ structHash)."""
    digest = keccak(EIP712_PREFIX + domain_separator(domain) + struct_hash(order))
    logger.debug("order sign hash salt=%d hash=0x%s", order.salt, digest.hex())
    return digest


def build_domain(chain_id: int, verifying_contract: str) -> EIP712Domain:
    """Domain for the exchange contract at ``verifying_contract`` on ``chain_id``."""
    return EIP712Domain(
        name=EIP712_DOMAIN_NAME,
        version=EIP712_DOMAIN_VERSION,
        chainId=chain_id,
        verifyingContract=verifying_contract,
    )
