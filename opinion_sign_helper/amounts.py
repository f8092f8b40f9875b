"""
Decimal-to-minor-unit amount pipeline.

Human amounts ("12.5 USDT") become uint256 integers scaled by the token's
decimals, and a limit order's maker/taker legs are derived from a price.
Every step uses ``Decimal`` or ``int``; a float input is routed through
``str()`` first so that ``0.1`` means ``Decimal("0.1")`` and not the binary
approximation (``int(float("1.013") * 1e9) == 1012999999``).
"""

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Optional, Type, Union

from .exceptions import InvalidAmount, InvalidParamError, InvalidPrice
from .types import UINT256_MAX, OrderType, Side, to_enum

logger = logging.getLogger(__name__)

AmountLike = Union[Decimal, str, int, float]

MAX_DECIMALS = 18

# The exchange rejects degenerate probabilities; both bounds are exclusive.
MIN_PRICE = Decimal("0.001")
MAX_PRICE = Decimal("0.999")

MAKER_SIGNIFICANT_DIGITS = 4
MIN_MAKER_AMOUNT = Decimal("1")

# Enough digits for a 78-digit uint256 divided by a 0.001 price plus a long
# fractional tail, so the final integer rounding sees the exact quotient.
_PRECISION = 200

# Plain ASCII decimal or scientific notation. Decimal() alone also takes
# underscores, non-ASCII digits and NaN/Infinity.
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


@dataclass(frozen=True)
class OrderAmounts:
    """Final on-chain legs of an order, in minor units."""

    maker_amount: int
    taker_amount: int
    price: Decimal


def to_decimal(value: AmountLike, name: str = "amount",
               error_cls: Type[InvalidParamError] = InvalidAmount) -> Decimal:
    """Parse ``value`` into a finite ``Decimal`` or raise ``error_cls``."""
    if isinstance(value, bool):
        raise error_cls(f"{name} must be numeric, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.fullmatch(text):
            raise error_cls(f"invalid {name} format: {value!r}")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise error_cls(f"invalid {name} format: {value!r}")
    else:
        raise error_cls(f"{name} must be numeric, got {type(value).__name__}")

    if not result.is_finite():
        raise error_cls(f"{name} must be finite, got: {value!r}")
    return result


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmount(f"decimals must be an integer, got {type(decimals).__name__}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidAmount(f"decimals must be between 0 and {MAX_DECIMALS}, got: {decimals}")


def to_minor_units(amount: AmountLike, decimals: int) -> int:
    """
    Convert a human-readable amount into token minor units ("wei").

    Fraction digits beyond ``decimals`` are truncated, not rounded: the
    exchange only tracks ``decimals`` digits on-chain.

    Args:
        amount: Positive amount (Decimal, decimal string, int or float)
        decimals: Token decimals, 0..18

    Returns:
        Integer in [1, 2**256 - 1]

    Raises:
        InvalidAmount: amount non-positive, malformed, too large, or zero
            after truncation; decimals out of range
    """
    _check_decimals(decimals)
    value = to_decimal(amount)
    if value <= 0:
        raise InvalidAmount(f"amount must be positive, got: {amount}")
    # 10**78 > 2**256; bail out before rendering an enormous exponent
    if value.adjusted() > 78:
        raise InvalidAmount(f"amount too large for uint256: {amount}")

    parts = format(value, "f").split(".")
    if len(parts) > 2:
        raise InvalidAmount(f"invalid amount format: {amount}")

    integer_part = parts[0]
    fraction_part = parts[1] if len(parts) == 2 else ""
    fraction_part = fraction_part[:decimals].ljust(decimals, "0")

    result = int(integer_part + fraction_part)
    if result > UINT256_MAX:
        raise InvalidAmount(f"amount too large for uint256: {result}")
    if result <= 0:
        raise InvalidAmount(f"calculated amount is zero for {amount} at {decimals} decimals")
    return result


def from_minor_units(value: int, decimals: int) -> Decimal:
    """Scale a minor-unit integer back into a human-readable ``Decimal``."""
    _check_decimals(decimals)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(value).scaleb(-decimals)


def round_to_significant_digits(value: int, n: int) -> int:
    """
    Keep the first ``n`` significant digits of ``value`` and zero the rest.

    Truncates toward zero: 123_456 with n=4 gives 123_400, never 123_500.

    >>> round_to_significant_digits(987654321, 4)
    987600000
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if value == 0:
        return 0

    magnitude = len(str(abs(value)))
    if magnitude <= n:
        return value

    divisor = 10 ** (magnitude - n)
    truncated = (abs(value) // divisor) * divisor
    return truncated if value > 0 else -truncated


def parse_price(price: AmountLike) -> Decimal:
    """Parse a limit price and enforce the exclusive (0.001, 0.999) range."""
    value = to_decimal(price, name="price", error_cls=InvalidPrice)
    if value <= MIN_PRICE or value >= MAX_PRICE:
        raise InvalidPrice(f"price must be between {MIN_PRICE} and {MAX_PRICE}, got: {price}")
    return value


def calculate_order_amounts(
    price: AmountLike,
    maker_amount: int,
    side: Side,
    decimals: int,
    rounding: str = ROUND_HALF_EVEN,
) -> OrderAmounts:
    """
    Derive the maker and taker legs of a limit order.

    The maker amount is first cut to 4 significant digits; that value, not
    the requested one, is what goes on-chain, so callers should show it to
    the user. Then:

    - BUY:  price = maker / taker, so taker = maker / price
    - SELL: price = taker / maker, so taker = maker * price

    The taker amount is rounded to an integer with ``rounding`` (a
    ``decimal`` rounding constant, half-even by default). Both legs are at
    least 1.

    Raises:
        InvalidPrice: price outside (0.001, 0.999)
        InvalidAmount: maker amount not a positive uint256, bad decimals,
            or the derived taker amount overflows uint256
        InvalidParamError: side is not BUY or SELL
    """
    price_value = parse_price(price)
    _check_decimals(decimals)
    if isinstance(maker_amount, bool) or not isinstance(maker_amount, int):
        raise InvalidAmount(f"maker amount must be an integer, got {type(maker_amount).__name__}")
    if maker_amount <= 0 or maker_amount > UINT256_MAX:
        raise InvalidAmount(f"maker amount out of range: {maker_amount}")
    side = to_enum(Side, "side", side)

    recalculated_maker = round_to_significant_digits(maker_amount, MAKER_SIGNIFICANT_DIGITS)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        if side == Side.BUY:
            raw_taker = Decimal(recalculated_maker) / price_value
        else:
            raw_taker = Decimal(recalculated_maker) * price_value
        taker_amount = int(raw_taker.quantize(Decimal(1), rounding=rounding))

    recalculated_maker = max(recalculated_maker, 1)
    taker_amount = max(taker_amount, 1)
    if taker_amount > UINT256_MAX:
        raise InvalidAmount(f"taker amount too large for uint256: {taker_amount}")

    logger.debug(
        "order amounts side=%s price=%s maker=%d->%d taker=%d",
        side.name, price_value, maker_amount, recalculated_maker, taker_amount,
    )
    return OrderAmounts(maker_amount=recalculated_maker, taker_amount=taker_amount, price=price_value)


def resolve_maker_amount(
    side: Side,
    price: Optional[AmountLike] = None,
    amount_in_quote_token: Optional[AmountLike] = None,
    amount_in_base_token: Optional[AmountLike] = None,
    order_type: OrderType = OrderType.LIMIT,
) -> Decimal:
    """
    Work out the human-readable maker amount from whichever token the user sized in.

    A BUY spends quote token, so a base-token size is multiplied by the
    price; a SELL spends base token, so a quote-token size is divided by it.
    Market orders have no price to convert with, so a market BUY must be
    sized in quote token and a market SELL in base token.
    """
    side = to_enum(Side, "side", side)
    order_type = to_enum(OrderType, "order_type", order_type)

    if amount_in_quote_token is not None and amount_in_base_token is not None:
        raise InvalidAmount("provide only one of amount_in_quote_token or amount_in_base_token")
    if amount_in_quote_token is None and amount_in_base_token is None:
        raise InvalidAmount(
            f"either amount_in_base_token or amount_in_quote_token must be provided for {side.name} orders"
        )

    if order_type == OrderType.MARKET:
        if side == Side.BUY and amount_in_base_token is not None:
            raise InvalidAmount("amount_in_base_token is not allowed for market buy")
        if side == Side.SELL and amount_in_quote_token is not None:
            raise InvalidAmount("amount_in_quote_token is not allowed for market sell")
        price_value = None
    else:
        if price is None:
            raise InvalidPrice("price is required for limit orders")
        price_value = to_decimal(price, name="price", error_cls=InvalidPrice)
        if price_value <= 0:
            raise InvalidPrice(f"price must be positive for limit orders, got: {price}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        if amount_in_base_token is not None:
            base = to_decimal(amount_in_base_token, name="amount_in_base_token")
            if base < MIN_MAKER_AMOUNT:
                raise InvalidAmount(f"amount_in_base_token must be at least {MIN_MAKER_AMOUNT}")
            maker = base * price_value if side == Side.BUY else base
        else:
            quote = to_decimal(amount_in_quote_token, name="amount_in_quote_token")
            if quote < MIN_MAKER_AMOUNT:
                raise InvalidAmount(f"amount_in_quote_token must be at least {MIN_MAKER_AMOUNT}")
            maker = quote if side == Side.BUY else quote / price_value

    if maker <= 0:
        raise InvalidAmount(f"calculated maker amount must be positive, got: {maker}")
    return maker


def build_order_amounts(
    side: Side,
    price: Optional[AmountLike],
    decimals: int,
    amount_in_quote_token: Optional[AmountLike] = None,
    amount_in_base_token: Optional[AmountLike] = None,
    order_type: OrderType = OrderType.LIMIT,
) -> OrderAmounts:
    """
    Run the full pipeline from a user's order form to on-chain legs.

    Limit orders go through ``calculate_order_amounts``. Market orders keep
    the converted maker amount as is, with a zero taker amount and a zero
    price: the exchange fills them at the book.
    """
    order_type = to_enum(OrderType, "order_type", order_type)
    maker = resolve_maker_amount(
        side, price,
        amount_in_quote_token=amount_in_quote_token,
        amount_in_base_token=amount_in_base_token,
        order_type=order_type,
    )
    maker_wei = to_minor_units(maker, decimals)

    if order_type == OrderType.MARKET:
        return OrderAmounts(maker_amount=maker_wei, taker_amount=0, price=Decimal(0))
    return calculate_order_amounts(price, maker_wei, side, decimals)
