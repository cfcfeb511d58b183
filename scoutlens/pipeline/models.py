"""Data models for the signal pipeline.

These models keep inputs and outputs explicit across each tier of the
pipeline so implementations (local heuristics, the analysis backend, test
doubles) can be swapped without changing data exchange formats. Pydantic is
used for validation and for JSON serialization at the HTTP/CLI surfaces.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

SYMBOL_PATTERN = re.compile(r"^[A-Z]{2,10}$")

_RECT_TOLERANCE = 1e-6


class Sentiment(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    MIXED = "mixed"
    POSITIVE = "positive"


class Scenario(str, Enum):
    GAINS = "gains"
    LOSSES = "losses"
    PORTFOLIO = "portfolio"


class Chain(str, Enum):
    EVM = "evm"
    BITCOIN = "bitcoin"
    SOLANA = "solana"


class SegmentKind(str, Enum):
    TOKEN = "token"
    PRICE = "price"
    LINE = "line"


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Action(str, Enum):
    REVIEW_TOKENS = "review_tokens"
    REVIEW_CONTRACTS = "review_contracts"
    CONSIDER_BUY = "consider_buy"
    CAUTION = "caution"
    MONITOR = "monitor"
    MANUAL_REVIEW = "manual_review"
    MANUAL_CHECK = "manual_check"
    RETRY = "retry"
    RESEARCH = "research"
    NO_ACTION = "no_action"


class PipelineMode(str, Enum):
    OCR_BACKEND = "ocr-backend"
    TEXT_BACKEND = "text-backend"
    OCR_ONLY = "ocr-only"
    FALLBACK = "fallback"


class ImageInput(BaseModel):
    """Captured raster plus its pixel dimensions.

    ``image`` is kept opaque (normally a ``PIL.Image.Image``); only the
    classifier looks inside it.
    """

    model_config = ConfigDict(frozen=True)

    image: object
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    source: Optional[str] = None

    @classmethod
    def from_image(cls, image: Any, source: Optional[str] = None) -> "ImageInput":
        width, height = image.size
        return cls(image=image, width=width, height=height, source=source)


class PixelBox(BaseModel):
    """Axis-aligned bounding box in pixel coordinates."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


class NormalizedRect(BaseModel):
    """Bounding box stored both as image fractions and as pixels.

    The two representations must agree with ``image_width``/``image_height``;
    use :meth:`from_pixels` to build one from a pixel request.
    """

    left: float = Field(..., ge=0.0, le=1.0)
    top: float = Field(..., ge=0.0, le=1.0)
    width: float = Field(..., gt=0.0, le=1.0)
    height: float = Field(..., gt=0.0, le=1.0)
    pixel: PixelBox
    image_width: int = Field(..., ge=1)
    image_height: int = Field(..., ge=1)

    @model_validator(mode="after")
    def _check_consistency(self) -> "NormalizedRect":
        box = self.pixel
        if box.x + box.width > self.image_width or box.y + box.height > self.image_height:
            raise ValueError("pixel box exceeds the source image bounds")
        expected = (
            box.x / self.image_width,
            box.y / self.image_height,
            box.width / self.image_width,
            box.height / self.image_height,
        )
        actual = (self.left, self.top, self.width, self.height)
        if any(abs(a - e) > _RECT_TOLERANCE for a, e in zip(actual, expected)):
            raise ValueError("fractional and pixel coordinates disagree")
        return self

    @classmethod
    def from_pixels(
        cls,
        x: int,
        y: int,
        width: int,
        height: int,
        *,
        image_width: int,
        image_height: int,
    ) -> "NormalizedRect":
        """Clamp a pixel box into the image and normalize it."""

        x = min(max(int(x), 0), image_width - 1)
        y = min(max(int(y), 0), image_height - 1)
        width = max(1, min(int(width), image_width - x))
        height = max(1, min(int(height), image_height - y))
        return cls(
            left=x / image_width,
            top=y / image_height,
            width=width / image_width,
            height=height / image_height,
            pixel=PixelBox(x=x, y=y, width=width, height=height),
            image_width=image_width,
            image_height=image_height,
        )


class TextSegment(BaseModel):
    text: str = Field(..., min_length=1)
    bounding_box: NormalizedRect
    confidence: float = Field(..., ge=0.0, le=1.0)
    kind: SegmentKind = SegmentKind.LINE


class OcrResult(BaseModel):
    """Output of a local OCR pass.

    ``full_text`` is the concatenation of the segment texts in emission order
    and ``tokens_detected`` only carries unique uppercase symbols.
    """

    success: bool
    full_text: str = ""
    segments: List[TextSegment] = Field(default_factory=list)
    tokens_detected: List[str] = Field(default_factory=list)
    prices_detected: List[str] = Field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    scenario: Optional[Scenario] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "OcrResult":
        if len(set(self.tokens_detected)) != len(self.tokens_detected):
            raise ValueError("tokens_detected must not contain duplicates")
        for token in self.tokens_detected:
            if not SYMBOL_PATTERN.match(token):
                raise ValueError(f"invalid token symbol: {token!r}")
        if self.segments:
            texts = [segment.text for segment in self.segments]
            if self.full_text not in {" ".join(texts), "\n".join(texts)}:
                raise ValueError("full_text must join the segment texts in order")
        return self

    @classmethod
    def failure(cls, error: str) -> "OcrResult":
        return cls(success=False, error=error)


class SentimentScore(BaseModel):
    label: Sentiment
    positive_hits: int = Field(0, ge=0)
    negative_hits: int = Field(0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence(self) -> float:
        total = self.positive_hits + self.negative_hits
        if total == 0:
            return 0.0
        return max(self.positive_hits, self.negative_hits) / total


class AddressMatch(BaseModel):
    address: str
    chain: Chain


class TokenMention(BaseModel):
    """A ticker plus the market context found on the same line."""

    symbol: str = Field(..., pattern=SYMBOL_PATTERN.pattern)
    name: Optional[str] = None
    price: Optional[str] = None
    change: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)


class TextAnalysis(BaseModel):
    text: str
    tokens: List[str] = Field(default_factory=list)
    token_details: List[TokenMention] = Field(default_factory=list)
    prices: List[str] = Field(default_factory=list)
    addresses: List[AddressMatch] = Field(default_factory=list)
    contracts: List[str] = Field(default_factory=list)
    wallets: List[str] = Field(default_factory=list)
    sentiment: SentimentScore
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class ScenarioProfile(BaseModel):
    """Canned signal reported for a scenario bucket."""

    tokens: List[str]
    prices: List[str]
    social_signals: List[str]
    confidence: float = Field(..., ge=0.0, le=1.0)


class ScenarioResult(BaseModel):
    scenario: Scenario
    sentiment: Sentiment
    confidence: float = Field(..., ge=0.0, le=1.0)
    green_ratio: float = Field(0.0, ge=0.0, le=1.0)
    red_ratio: float = Field(0.0, ge=0.0, le=1.0)
    profile: ScenarioProfile


class BackendVerdict(BaseModel):
    success: bool
    detected_tokens: List[str] = Field(default_factory=list)
    detected_contracts: List[str] = Field(default_factory=list)
    detected_wallets: List[str] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    error: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class Signal(BaseModel):
    """Tier-independent view of what was extracted."""

    tokens: List[str] = Field(default_factory=list)
    prices: List[str] = Field(default_factory=list)
    contracts: List[str] = Field(default_factory=list)
    wallets: List[str] = Field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    complete: bool = True

    @classmethod
    def from_ocr(cls, result: OcrResult) -> "Signal":
        return cls(
            tokens=list(result.tokens_detected),
            prices=list(result.prices_detected),
            sentiment=result.sentiment,
            confidence=result.confidence,
            complete=result.success,
        )

    @classmethod
    def from_verdict(
        cls,
        verdict: BackendVerdict,
        sentiment: Sentiment = Sentiment.NEUTRAL,
        prices: Optional[List[str]] = None,
    ) -> "Signal":
        return cls(
            tokens=list(verdict.detected_tokens),
            prices=list(prices or []),
            contracts=list(verdict.detected_contracts),
            wallets=list(verdict.detected_wallets),
            sentiment=sentiment,
            confidence=verdict.confidence,
            complete=verdict.success,
        )

    @classmethod
    def empty(cls) -> "Signal":
        return cls(complete=False)


class Recommendation(BaseModel):
    """Actionable output; exactly one of ``priority``/``risk`` is set.

    Both fields use the same ordinal :class:`Level` scale, read it through
    :attr:`level` to stay agnostic of the producing tier.
    """

    action: Action
    message: str
    priority: Optional[Level] = None
    risk: Optional[Level] = None
    tokens: List[str] = Field(default_factory=list)
    contracts: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _exactly_one_level(self) -> "Recommendation":
        if (self.priority is None) == (self.risk is None):
            raise ValueError("exactly one of priority or risk must be set")
        return self

    @property
    def level(self) -> Level:
        return self.priority if self.priority is not None else self.risk  # type: ignore[return-value]


class PipelineResult(BaseModel):
    success: bool
    mode: PipelineMode
    ocr_text: Optional[str] = None
    signal: Signal
    recommendation: Recommendation
    advisory: Optional[Recommendation] = None
    error: Optional[str] = None


class CapabilitySummary(BaseModel):
    success: bool
    processor: bool = False
    worker: bool = False
    backend: bool = False
    error: Optional[str] = None


class PipelineStatus(BaseModel):
    initialized: bool
    processor: bool
    worker: bool
    backend: bool
    ready: bool
