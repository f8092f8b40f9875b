"""
OPINION CTF Exchange order sign helper.

Components:
- amounts: decimal → minor-unit conversion, significant-digit rounding,
  maker/taker amount derivation
- typed_data: EIP-712 domain separator, Order struct hash, sign hash
- signer: secp256k1 signing with v normalized to 27/28, signer recovery
- order_builder: salted order construction and signing for one exchange
- opinion_order_signer: signing entry point and CLI
"""

__version__ = "0.1.0"

from opinion_sign_helper.amounts import (
    OrderAmounts,
    build_order_amounts,
    calculate_order_amounts,
    from_minor_units,
    resolve_maker_amount,
    round_to_significant_digits,
    to_minor_units,
)
from opinion_sign_helper.exceptions import (
    EncodingError,
    InvalidAmount,
    InvalidParamError,
    InvalidPrice,
    OpinionSignError,
    SigningError,
)
from opinion_sign_helper.order_builder import OrderBuilder
from opinion_sign_helper.signer import recover_signer, sign_order_hash
from opinion_sign_helper.typed_data import (
    build_domain,
    domain_separator,
    sign_hash,
    struct_hash,
)
from opinion_sign_helper.types import (
    EIP712Domain,
    Order,
    OrderData,
    OrderType,
    Side,
    SignatureType,
    SignedOrder,
)

__all__ = [
    "OrderAmounts",
    "build_order_amounts",
    "calculate_order_amounts",
    "from_minor_units",
    "resolve_maker_amount",
    "round_to_significant_digits",
    "to_minor_units",
    "EncodingError",
    "InvalidAmount",
    "InvalidParamError",
    "InvalidPrice",
    "OpinionSignError",
    "SigningError",
    "OrderBuilder",
    "recover_signer",
    "sign_order_hash",
    "build_domain",
    "domain_separator",
    "sign_hash",
    "struct_hash",
    "EIP712Domain",
    "Order",
    "OrderData",
    "OrderType",
    "Side",
    "SignatureType",
    "SignedOrder",
]
