"""Lexical signal extraction from raw or OCR text.

Everything here is a pure function of its arguments: the same text always
yields the same tokens, prices, addresses and sentiment, which keeps the
higher tiers easy to test.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from ..resources.lexicon import COMMON_WORDS, DEFAULT_BEARISH_WORDS, DEFAULT_BULLISH_WORDS, TOKEN_NAMES
from .models import AddressMatch, Chain, Sentiment, SentimentScore, TextAnalysis, TokenMention

__all__ = [
    "DEFAULT_BULLISH_WORDS",
    "DEFAULT_BEARISH_WORDS",
    "extract_tokens",
    "extract_prices",
    "extract_typed_addresses",
    "extract_addresses",
    "describe_token",
    "token_confidence",
    "extraction_confidence",
    "classify_sentiment",
    "analyze_text",
]

_DOLLAR_TOKEN_RE = re.compile(r"\$([A-Z]{2,6})(?![A-Za-z])")
_BARE_TOKEN_RE = re.compile(r"(?<![A-Za-z])[A-Z]{2,10}(?![A-Za-z])")

# Integer part is either thousands-grouped ("41,200") or a plain digit run.
_AMOUNT = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,6})?"
_DOLLAR_PRICE_RE = re.compile(rf"\${_AMOUNT}")
_UNIT_PRICE_RE = re.compile(rf"(?<![\d,.]){_AMOUNT}\s*(?:USDC|USDT|USD)\b", re.IGNORECASE)
_CHANGE_RE = re.compile(r"[+-]?\d+(?:\.\d+)?%")

_BASE58 = "1-9A-HJ-NP-Za-km-z"
_ADDRESS_PATTERNS: Tuple[Tuple[Chain, Pattern[str]], ...] = (
    (Chain.EVM, re.compile(r"\b0x[a-fA-F0-9]{40}\b")),
    (Chain.BITCOIN, re.compile(r"\bbc1[a-z0-9]{39,59}\b")),
    (Chain.BITCOIN, re.compile(rf"(?<![{_BASE58}])[13][{_BASE58}]{{25,34}}(?![{_BASE58}])")),
    (Chain.SOLANA, re.compile(rf"(?<![{_BASE58}])[{_BASE58}]{{32,44}}(?![{_BASE58}])")),
)


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def extract_tokens(text: str, ignore: Optional[Iterable[str]] = None) -> List[str]:
    """Return ticker symbols in order of first appearance.

    ``$SYMBOL`` mentions (2-6 letters) and bare uppercase runs (2-10 letters)
    are both accepted. ``ignore`` filters bare runs only; an explicit ``$``
    prefix always counts as a ticker.
    """

    if not text:
        return []
    skip = {word.upper() for word in ignore} if ignore else set()

    hits: List[Tuple[int, str]] = []
    for match in _DOLLAR_TOKEN_RE.finditer(text):
        hits.append((match.start(), match.group(1).upper()))
    for match in _BARE_TOKEN_RE.finditer(text):
        symbol = match.group(0).upper()
        if symbol in skip:
            continue
        hits.append((match.start(), symbol))

    hits.sort(key=lambda hit: hit[0])
    return _dedupe(symbol for _, symbol in hits)


def extract_prices(text: str) -> List[str]:
    """Return ``$12.34`` style and ``12.34 USD(C)`` style prices, deduplicated."""

    if not text:
        return []
    hits: List[Tuple[int, str]] = []
    for pattern in (_DOLLAR_PRICE_RE, _UNIT_PRICE_RE):
        hits.extend((match.start(), match.group(0)) for match in pattern.finditer(text))
    hits.sort(key=lambda hit: hit[0])
    return _dedupe(value for _, value in hits)


def extract_typed_addresses(text: str) -> List[AddressMatch]:
    """Return on-chain addresses tagged with their chain, in text order.

    Patterns are tried from most to least specific (EVM, bech32, legacy
    Bitcoin, generic base58) and each match is masked before the next pass,
    so an address is reported once under the first chain that claims it.
    """

    if not text:
        return []
    masked = text
    hits: List[Tuple[int, str, Chain]] = []
    for chain, pattern in _ADDRESS_PATTERNS:
        for match in pattern.finditer(masked):
            hits.append((match.start(), match.group(0), chain))
        masked = pattern.sub(lambda m: " " * len(m.group(0)), masked)

    hits.sort(key=lambda hit: hit[0])
    seen = set()
    addresses: List[AddressMatch] = []
    for _, address, chain in hits:
        if address not in seen:
            seen.add(address)
            addresses.append(AddressMatch(address=address, chain=chain))
    return addresses


def extract_addresses(text: str) -> Tuple[List[str], List[str]]:
    """Split on-chain addresses into ``(contracts, wallets)``.

    EVM ``0x`` addresses are reported as contracts; Bitcoin and base58
    (Solana style) addresses as wallets.
    """

    contracts: List[str] = []
    wallets: List[str] = []
    for match in extract_typed_addresses(text):
        (contracts if match.chain == Chain.EVM else wallets).append(match.address)
    return contracts, wallets


def _lines_mentioning(text: str, symbol: str) -> List[str]:
    pattern = re.compile(rf"(?<![A-Za-z]){re.escape(symbol)}(?![A-Za-z])")
    return [line for line in text.splitlines() if pattern.search(line)]


def _price_near(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        match = _DOLLAR_PRICE_RE.search(line)
        if match:
            return match.group(0)
    return None


def _change_near(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        match = _CHANGE_RE.search(line)
        if match:
            return match.group(0)
    return None


def token_confidence(symbol: str, *, price: Optional[str] = None, change: Optional[str] = None) -> float:
    """Score one ticker: 0.5 base, +0.3 known name, +0.1 price, +0.05 change.

    Two-letter symbols lose 0.1; the result is clamped to ``[0.1, 1.0]``.
    """

    score = 0.5
    if symbol.upper() in TOKEN_NAMES:
        score += 0.3
    if price:
        score += 0.1
    if change:
        score += 0.05
    if len(symbol) <= 2:
        score -= 0.1
    return min(max(score, 0.1), 1.0)


def describe_token(text: str, symbol: str) -> TokenMention:
    """Attach the first price and percent change found on lines naming ``symbol``."""

    lines = _lines_mentioning(text or "", symbol)
    price = _price_near(lines)
    change = _change_near(lines)
    return TokenMention(
        symbol=symbol,
        name=TOKEN_NAMES.get(symbol.upper()),
        price=price,
        change=change,
        confidence=token_confidence(symbol, price=price, change=change),
    )


def extraction_confidence(tokens: Sequence[object], addresses: Sequence[object], prices: Sequence[object]) -> float:
    score = 0.3
    if tokens:
        score += 0.4
    if addresses:
        score += 0.2
    if prices:
        score += 0.1
    return min(score, 1.0)


@lru_cache(maxsize=256)
def _word_pattern(word: str) -> Pattern[str]:
    escaped = re.escape(word)
    if any(ch.isalnum() for ch in word):
        return re.compile(rf"(?<![a-z0-9]){escaped}(?![a-z0-9])")
    # Sign-like markers ("+5%", " - ") count unless glued to a word ("long-term").
    return re.compile(rf"(?<!\w){escaped}")


def _count_hits(lowered: str, words: Sequence[str]) -> int:
    return sum(len(_word_pattern(word.lower()).findall(lowered)) for word in words)


def classify_sentiment(
    text: str,
    bullish_words: Sequence[str] = DEFAULT_BULLISH_WORDS,
    bearish_words: Sequence[str] = DEFAULT_BEARISH_WORDS,
) -> SentimentScore:
    """Count bullish and bearish vocabulary hits and label the text."""

    lowered = (text or "").lower()
    positive = _count_hits(lowered, bullish_words)
    negative = _count_hits(lowered, bearish_words)

    if positive > negative:
        label = Sentiment.BULLISH
    elif negative > positive:
        label = Sentiment.BEARISH
    else:
        label = Sentiment.NEUTRAL
    return SentimentScore(label=label, positive_hits=positive, negative_hits=negative)


def analyze_text(
    text: str,
    *,
    bullish_words: Sequence[str] = DEFAULT_BULLISH_WORDS,
    bearish_words: Sequence[str] = DEFAULT_BEARISH_WORDS,
    ignore: Optional[Iterable[str]] = COMMON_WORDS,
) -> TextAnalysis:
    """Run every extractor over ``text``.

    Addresses are removed before ticker extraction so that uppercase runs
    inside them are not reported as symbols.
    """

    text = text or ""
    addresses = extract_typed_addresses(text)
    stripped = text
    for match in addresses:
        stripped = stripped.replace(match.address, " ")

    tokens = extract_tokens(stripped, ignore=ignore)
    prices = extract_prices(text)
    return TextAnalysis(
        text=text,
        tokens=tokens,
        token_details=[describe_token(stripped, symbol) for symbol in tokens],
        prices=prices,
        addresses=addresses,
        contracts=[m.address for m in addresses if m.chain == Chain.EVM],
        wallets=[m.address for m in addresses if m.chain != Chain.EVM],
        sentiment=classify_sentiment(text, bullish_words, bearish_words),
        confidence=extraction_confidence(tokens, addresses, prices),
    )
