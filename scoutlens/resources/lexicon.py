"""Word lists and symbol tables used by the lexical signal extractor.

Plain tuples/dicts so that callers can pass their own variants through
:class:`scoutlens.config.PipelineConfig` without touching the extractor.
"""
from __future__ import annotations

from typing import Dict, Tuple

DEFAULT_BULLISH_WORDS: Tuple[str, ...] = (
    "up",
    "pump",
    "moon",
    "bullish",
    "gain",
    "+",
    "rise",
    "buy",
    "long",
    "dca",
    "accumulate",
    "breakout",
    "rally",
)

DEFAULT_BEARISH_WORDS: Tuple[str, ...] = (
    "down",
    "dump",
    "crash",
    "bearish",
    "loss",
    "-",
    "fall",
    "sell",
    "short",
    "exit",
    "warning",
)

# Uppercase words that show up in screenshots but are not tickers.
COMMON_WORDS: Tuple[str, ...] = (
    "THE", "AND", "FOR", "ARE", "BUT", "NOT", "YOU", "ALL", "CAN", "WAS",
    "ONE", "OUR", "HAS", "HOW", "NEW", "NOW", "WHO", "ITS", "GET", "TOP",
    "BUY", "SELL", "LONG", "SHORT", "PUMP", "DUMP", "MOON", "APY", "TVL",
    "ATH", "ATL", "USD",
)

TOKEN_NAMES: Dict[str, str] = {
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
    "SOL": "Solana",
    "USDC": "USD Coin",
    "USDT": "Tether",
    "BNB": "Binance Coin",
    "ADA": "Cardano",
    "XRP": "Ripple",
    "DOT": "Polkadot",
    "DOGE": "Dogecoin",
    "AVAX": "Avalanche",
    "SHIB": "Shiba Inu",
    "MATIC": "Polygon",
    "LTC": "Litecoin",
    "LINK": "Chainlink",
    "UNI": "Uniswap",
    "AAVE": "Aave",
    "COMP": "Compound",
    "MKR": "Maker",
    "SNX": "Synthetix",
    "CRV": "Curve",
    "YFI": "yearn.finance",
    "SUSHI": "SushiSwap",
    "JUP": "Jupiter",
    "BONK": "Bonk",
    "WIF": "dogwifhat",
    "PEPE": "Pepe",
    "FLOKI": "Floki Inu",
    "POPCAT": "Popcat",
    "BRETT": "Brett",
    "TOSHI": "Toshi",
    "KAITO": "Kaito AI",
    "DEGEN": "Degen",
}
