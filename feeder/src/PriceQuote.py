"""PriceQuote: A validated USD price for one token, and its on-chain form.

Feed contracts store answers as integers with 8 decimals (the Chainlink
convention). Conversion goes through the shortest decimal representation of
the float so that values like 1234.5678901 are not shifted by binary
rounding before truncation.

.. code-block:: python

    >>> to_fixed_point(2500.123456789)
    250012345678
    >>> to_fixed_point(0.000000001)
    0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

# Number of decimals used by the feed contracts.
NUM_DECIMALS = 8


def to_fixed_point(usd_price: float, decimals: int = NUM_DECIMALS) -> int:
    """Scale a USD price by 10**decimals, truncating toward zero.

    :param usd_price: Price in USD.
    :param decimals: Number of fixed-point decimals (default: 8).
    :returns: Integer answer to store on-chain.
    """
    return int(Decimal(repr(float(usd_price))).scaleb(decimals))


@dataclass(frozen=True)
class PriceQuote:
    """USD price of a single token, fetched in the current cycle.

    :ivar symbol: Token symbol (e.g., "WETH").
    :ivar usd_price: Positive, finite USD price.
    """

    symbol: str
    usd_price: float

    def __post_init__(self) -> None:
        if isinstance(self.usd_price, bool) or not isinstance(
            self.usd_price, (int, float)
        ):
            raise ValueError(f"{self.symbol}: price must be a number, got {self.usd_price!r}")
        if not math.isfinite(self.usd_price) or self.usd_price <= 0:
            raise ValueError(f"{self.symbol}: price must be positive, got {self.usd_price!r}")

    def to_fixed_point(self, decimals: int = NUM_DECIMALS) -> int:
        """Return the integer answer to submit to the feed contract."""
        return to_fixed_point(self.usd_price, decimals)
