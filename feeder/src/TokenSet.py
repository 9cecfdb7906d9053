"""TokenSet: The fixed, ordered set of tokens whose feeds are kept in sync.

Each token symbol maps to the identifier the price API expects (a CoinGecko
coin id). The mapping is one-to-one and never changes after startup.

.. code-block:: python

    >>> tokens = TokenSet.from_string("WETH,USDC")
    >>> tokens.symbols
    ('WETH', 'USDC')
    >>> tokens.source_ids
    {'WETH': 'ethereum', 'USDC': 'usd-coin'}
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

# CoinGecko coin ids for the tokens deployed with a <SYMBOL>PriceFeed contract.
DEFAULT_SOURCE_IDS: dict[str, str] = {
    "WETH": "ethereum",
    "USDC": "usd-coin",
    "BTC": "bitcoin",
    "wstETH": "wrapped-steth",
}

DEFAULT_TOKENS = ",".join(DEFAULT_SOURCE_IDS)


def parse_source_ids(source_ids_str: str | None) -> dict[str, str]:
    """Parse comma-separated source id overrides into a dictionary.

    Format: SYMBOL1=id1,SYMBOL2=id2
    Example: WETH=ethereum,ARB=arbitrum

    Symbols keep their case since feed contract names are case-sensitive.

    :param source_ids_str: Comma-separated override string.
    :returns: Dict mapping token symbols to source ids.
    :raises ValueError: If an entry is not in SYMBOL=id form.
    """
    if not source_ids_str:
        return {}

    source_ids = {}
    for item in source_ids_str.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ValueError(f"Invalid source id entry '{item}'. Expected SYMBOL=id")
        symbol, source_id = item.split("=", 1)
        symbol, source_id = symbol.strip(), source_id.strip()
        if not symbol or not source_id:
            raise ValueError(f"Invalid source id entry '{item}'. Expected SYMBOL=id")
        source_ids[symbol] = source_id
    return source_ids


class TokenSet:
    """Ordered, immutable set of token symbols and their price API ids.

    Iteration follows declaration order, which is also the order in which
    feeds are updated each cycle.

    :ivar symbols: Token symbols in declaration order.
    :ivar source_ids: Read-only mapping from symbol to price API id.
    """

    def __init__(self, source_ids: Mapping[str, str]) -> None:
        """Initialize the token set.

        :param source_ids: Ordered mapping from token symbol to price API id.
        :raises ValueError: If empty or if two symbols share an id.
        """
        if not source_ids:
            raise ValueError("At least one token must be specified")

        seen: dict[str, str] = {}
        for symbol, source_id in source_ids.items():
            if source_id in seen:
                raise ValueError(
                    f"Tokens {seen[source_id]} and {symbol} both map to "
                    f"source id '{source_id}'"
                )
            seen[source_id] = symbol

        self._source_ids = MappingProxyType(dict(source_ids))
        self.symbols: tuple[str, ...] = tuple(self._source_ids)

    @property
    def source_ids(self) -> Mapping[str, str]:
        """Return the read-only symbol to source id mapping."""
        return self._source_ids

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._source_ids

    def __repr__(self) -> str:
        return f"TokenSet({dict(self._source_ids)!r})"

    @classmethod
    def from_string(
        cls,
        tokens_str: str,
        overrides: Mapping[str, str] | None = None,
    ) -> TokenSet:
        """Build a token set from a comma-separated symbol list.

        :param tokens_str: Symbols like "WETH,USDC,BTC".
        :param overrides: Optional source ids replacing or extending the defaults.
        :returns: New TokenSet in the order the symbols were listed.
        :raises ValueError: On duplicate symbols or symbols without a source id.
        """
        known = dict(DEFAULT_SOURCE_IDS)
        known.update(overrides or {})

        source_ids: dict[str, str] = {}
        for symbol in (s.strip() for s in tokens_str.split(",")):
            if not symbol:
                continue
            if symbol in source_ids:
                raise ValueError(f"Duplicate token symbol: {symbol}")
            if symbol not in known:
                raise ValueError(
                    f"No source id for token '{symbol}'. "
                    f"Known: {', '.join(sorted(known))}"
                )
            source_ids[symbol] = known[symbol]

        return cls(source_ids)
