"""
secp256k1 signing of order hashes.

The raw curve signature carries a recovery id of 0 or 1. Exchange
contracts use ``ecrecover``, which expects 27 or 28, so the id is shifted
before it goes into the 65-byte ``r ++ s ++ v`` signature.
"""

import logging
from typing import Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from hexbytes import HexBytes

from .exceptions import SigningError
from .typed_data import sign_hash
from .types import EIP712Domain, Order

logger = logging.getLogger(__name__)

V_OFFSET = 27
SIGNATURE_LENGTH = 65


def load_account(private_key: Union[str, bytes]) -> LocalAccount:
    """Parse a hex (with or without ``0x``) or raw 32-byte private key."""
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError, ValidationError) as e:
        raise SigningError(f"invalid private key: {e}") from e


def sign_digest(digest: bytes, private_key: Union[str, bytes]) -> bytes:
    """Sign a 32-byte digest, returning ``r ++ s ++ v`` with v in {27, 28}."""
    if len(digest) != 32:
        raise SigningError(f"digest must be 32 bytes, got {len(digest)}")
    account = load_account(private_key)
    try:
        raw = keys.PrivateKey(bytes(account.key)).sign_msg_hash(digest)
    except (ValidationError, ValueError) as e:
        raise SigningError(f"failed to sign digest: {e}") from e

    return (
        raw.r.to_bytes(32, byteorder="big")
        + raw.s.to_bytes(32, byteorder="big")
        + bytes([raw.v + V_OFFSET])
    )


def sign_order_hash(order: Order, domain: EIP712Domain, private_key: Union[str, bytes]) -> bytes:
    """EIP-712 sign ``order`` under ``domain``; returns the 65-byte signature."""
    signature = sign_digest(sign_hash(domain, order), private_key)
    logger.debug("signed order salt=%d", order.salt)
    return signature


def split_signature(signature: Union[str, bytes]) -> tuple[int, int, int]:
    """Split a 65-byte signature into (r, s, v) exactly as stored."""
    try:
        sig = HexBytes(signature)
    except (ValueError, TypeError) as e:
        raise SigningError(f"malformed signature: {e}") from e
    if len(sig) != SIGNATURE_LENGTH:
        raise SigningError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(sig)}")
    r = int.from_bytes(sig[:32], byteorder="big")
    s = int.from_bytes(sig[32:64], byteorder="big")
    return r, s, sig[64]


def recover_digest_signer(digest: bytes, signature: Union[str, bytes]) -> str:
    """Checksum address of the key that produced ``signature`` over ``digest``."""
    r, s, v = split_signature(signature)
    if v >= V_OFFSET:
        v -= V_OFFSET
    try:
        public_key = keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as e:
        raise SigningError(f"cannot recover signer: {e}") from e
    return public_key.to_checksum_address()


def recover_signer(order: Order, domain: EIP712Domain, signature: Union[str, bytes]) -> str:
    """Checksum address that signed ``order`` under ``domain``."""
    return recover_digest_signer(sign_hash(domain, order), signature)
