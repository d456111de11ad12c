"""PegNet ticker registry and the ticker-keyed map wire codec.

Internally balances and rates are keyed by Ticker members. On the wire they
are JSON objects keyed by the canonical symbol ("PEG", "pUSD", ...), never
by the numeric code the store uses.
"""

from collections.abc import Mapping
from enum import Enum


class Ticker(str, Enum):
    """PegNet asset symbol. Member order defines the stable numeric code."""

    PEG = "PEG"
    pUSD = "pUSD"
    pEUR = "pEUR"
    pJPY = "pJPY"
    pGBP = "pGBP"
    pCAD = "pCAD"
    pCHF = "pCHF"
    pINR = "pINR"
    pSGD = "pSGD"
    pCNY = "pCNY"
    pHKD = "pHKD"
    pKRW = "pKRW"
    pBRL = "pBRL"
    pPHP = "pPHP"
    pMXN = "pMXN"
    pXAU = "pXAU"
    pXAG = "pXAG"
    pXBT = "pXBT"
    pETH = "pETH"
    pLTC = "pLTC"
    pRVN = "pRVN"
    pXBC = "pXBC"
    pFCT = "pFCT"
    pBNB = "pBNB"
    pBCH = "pBCH"
    pZEC = "pZEC"
    pDASH = "pDASH"

    @property
    def code(self) -> int:
        """Numeric code used by the ledger store (1-based)."""
        return _CODES[self]

    @classmethod
    def from_code(cls, code: int) -> "Ticker":
        try:
            return _BY_CODE[code]
        except KeyError:
            raise ValueError(f"invalid ticker code: {code}") from None

    @classmethod
    def from_symbol(cls, symbol: str) -> "Ticker":
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"invalid token type: {symbol!r}") from None


USD_TICKER = Ticker.pUSD

_CODES: dict[Ticker, int] = {t: i for i, t in enumerate(Ticker, start=1)}
_BY_CODE: dict[int, Ticker] = {i: t for t, i in _CODES.items()}


def encode_ticker_map(values: Mapping[Ticker, int]) -> dict[str, int]:
    """Encode a ticker-keyed map into its string-keyed wire form."""
    return {ticker.value: amount for ticker, amount in values.items()}


def decode_ticker_map(data: Mapping[str, int]) -> dict[Ticker, int]:
    """Decode a string-keyed wire map, rejecting unrecognized symbols.

    Raises:
        ValueError: If a key is not a registered symbol or a value is not a
            non-negative integer.
    """
    result: dict[Ticker, int] = {}
    for symbol, amount in data.items():
        ticker = Ticker.from_symbol(symbol)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"invalid amount for {symbol}: {amount!r}")
        result[ticker] = amount
    return result
