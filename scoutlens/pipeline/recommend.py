"""Turn extracted signals into recommendations.

Backend-derived signals are graded on the ``priority`` scale, local
heuristic signals on the ``risk`` scale; :attr:`Recommendation.level` reads
either one.
"""
from __future__ import annotations

from typing import Iterable

from ..resources.lexicon import TOKEN_NAMES
from .models import Action, Level, Recommendation, Sentiment, Signal

LOW_CONFIDENCE_THRESHOLD = 0.6
HIGH_PRIORITY_CONFIDENCE = 0.8


def _describe_tokens(tokens: Iterable[str]) -> str:
    parts = []
    for symbol in tokens:
        name = TOKEN_NAMES.get(symbol.upper())
        parts.append(f"{symbol} ({name})" if name else symbol)
    return ", ".join(parts)


def synthesize(signal: Signal, *, high_priority_confidence: float = HIGH_PRIORITY_CONFIDENCE) -> Recommendation:
    """Grade a backend-backed signal.

    Tokens take precedence over contracts when both are present, even
    though a contract-only finding is always high priority.
    """

    if not signal.complete:
        return Recommendation(
            action=Action.RETRY,
            message="Analysis incomplete - retry recommended",
            priority=Level.LOW,
        )

    if signal.tokens:
        priority = Level.HIGH if signal.confidence > high_priority_confidence else Level.MEDIUM
        return Recommendation(
            action=Action.REVIEW_TOKENS,
            message=f"Found {len(signal.tokens)} token(s): {_describe_tokens(signal.tokens)}",
            priority=priority,
            tokens=list(signal.tokens),
        )

    if signal.contracts:
        return Recommendation(
            action=Action.REVIEW_CONTRACTS,
            message=f"Found {len(signal.contracts)} contract(s) - verify before interaction",
            priority=Level.HIGH,
            contracts=list(signal.contracts),
        )

    return Recommendation(
        action=Action.NO_ACTION,
        message="No significant Web3 entities detected",
        priority=Level.LOW,
    )


def synthesize_local(
    signal: Signal,
    *,
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> Recommendation:
    """Grade a locally extracted signal using its sentiment.

    Low confidence overrides every other rule.
    """

    if signal.confidence < low_confidence_threshold:
        return Recommendation(
            action=Action.RESEARCH,
            message="Low confidence in OCR results. Manual research recommended.",
            risk=Level.HIGH,
            tokens=list(signal.tokens),
        )

    if signal.tokens and signal.sentiment in (Sentiment.BULLISH, Sentiment.POSITIVE):
        return Recommendation(
            action=Action.CONSIDER_BUY,
            message=f"Bullish signals detected for {', '.join(signal.tokens)}. Consider small position.",
            risk=Level.MEDIUM,
            tokens=list(signal.tokens),
        )

    if signal.tokens and signal.sentiment == Sentiment.BEARISH:
        return Recommendation(
            action=Action.CAUTION,
            message="Bearish signals detected. Consider taking profits or avoiding new positions.",
            risk=Level.HIGH,
            tokens=list(signal.tokens),
        )

    return Recommendation(
        action=Action.MONITOR,
        message="Neutral signals. Continue monitoring for clearer trends.",
        risk=Level.LOW,
        tokens=list(signal.tokens),
    )


def manual_review_recommendation() -> Recommendation:
    return Recommendation(
        action=Action.MANUAL_REVIEW,
        message="Backend unavailable - manual review recommended",
        priority=Level.MEDIUM,
    )


def manual_check_recommendation() -> Recommendation:
    return Recommendation(
        action=Action.MANUAL_CHECK,
        message="Please check your connection and try again",
        priority=Level.LOW,
    )
