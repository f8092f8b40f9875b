"""Build, salt and sign orders for one exchange contract."""

import logging
import random
import time
from typing import Optional, Union

from .exceptions import InvalidParamError
from .signer import load_account, sign_order_hash
from .typed_data import build_domain
from .types import Order, OrderData, Side, SignedOrder, ZERO_ADDRESS

logger = logging.getLogger(__name__)


class OrderBuilder:
    """
    Builds orders bound to a single exchange contract and chain and signs
    them with one key.

    The key is parsed once at construction; a bad key fails here with
    ``SigningError`` rather than on the first order.
    """

    def __init__(self, exchange_address: str, chain_id: int, private_key: Union[str, bytes]):
        self.domain = build_domain(chain_id, exchange_address)
        self._account = load_account(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    @staticmethod
    def generate_salt() -> int:
        """Practically unique per order; not meant to be unpredictable."""
        return int(time.time()) * random.randint(1, 2**31 - 1)

    def build_order(self, data: OrderData, salt: Optional[int] = None) -> Order:
        self._validate_inputs(data)
        return Order(
            salt=self.generate_salt() if salt is None else salt,
            maker=data.maker,
            signer=data.signer or data.maker,
            taker=data.taker or ZERO_ADDRESS,
            tokenId=data.tokenId,
            makerAmount=data.makerAmount,
            takerAmount=data.takerAmount,
            expiration=data.expiration or 0,
            nonce=data.nonce or 0,
            feeRateBps=data.feeRateBps or 0,
            side=data.side,
            signatureType=data.signatureType,
        )

    def sign_order(self, order: Order) -> str:
        """``0x``-prefixed 130-hex-character signature of ``order``."""
        signature = sign_order_hash(order, self.domain, self._account.key)
        return "0x" + signature.hex()

    def build_signed_order(self, data: OrderData, salt: Optional[int] = None) -> SignedOrder:
        order = self.build_order(data, salt=salt)
        signed = SignedOrder(order=order, signature=self.sign_order(order))
        logger.info(
            "built signed order salt=%d side=%s maker_amount=%d taker_amount=%d",
            order.salt, order.side.name, order.makerAmount, order.takerAmount,
        )
        return signed

    @staticmethod
    def _validate_inputs(data: OrderData) -> None:
        if not data.maker:
            raise InvalidParamError("maker is required")
        if data.tokenId in (None, ""):
            raise InvalidParamError("tokenId is required")
        if data.makerAmount in (None, ""):
            raise InvalidParamError("makerAmount is required")
        if data.takerAmount in (None, ""):
            raise InvalidParamError("takerAmount is required")
        if data.side not in (Side.BUY, Side.SELL):
            raise InvalidParamError(f"invalid side: {data.side!r}")
