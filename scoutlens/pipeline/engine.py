"""Local (tier 2) OCR engine.

The engine does not perform real character recognition. It classifies the
screenshot with an :class:`~scoutlens.pipeline.interfaces.ImageClassifier`,
lays the scenario's canned tokens and prices out on a deterministic grid and
runs the lexical extractor over the resulting text, producing the same
:class:`~scoutlens.pipeline.models.OcrResult` shape a real OCR backend would.

Only one image is processed at a time per engine instance. A call that
arrives while another is in flight is rejected immediately with a busy
failure instead of being queued.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import List, Optional, Sequence

from ..errors import BusyError, ScoutLensError
from ..resources.lexicon import DEFAULT_BEARISH_WORDS, DEFAULT_BULLISH_WORDS
from .classifier import PixelStatsClassifier
from .interfaces import ImageClassifier, TextSource
from .models import (
    ImageInput,
    NormalizedRect,
    OcrResult,
    ScenarioProfile,
    SegmentKind,
    Sentiment,
    TextSegment,
)
from .patterns import classify_sentiment, extract_prices, extract_tokens

logger = logging.getLogger(__name__)

# (x0, y0, x step, y step, width, height) of the synthetic layout grid
_TOKEN_GRID = (20, 50, 80, 30, 60, 20)
_PRICE_GRID = (120, 50, 80, 30, 70, 20)

_OPPOSITES = {
    (Sentiment.BULLISH, Sentiment.BEARISH),
    (Sentiment.BEARISH, Sentiment.BULLISH),
}


class LocalOcrEngine(TextSource):
    """Heuristic OCR engine guarded by a single-flight busy flag.

    Args:
        classifier: Scenario classifier; defaults to
            :class:`PixelStatsClassifier`.
        latency: Artificial delay in seconds standing in for OCR time. The
            engine always yields to the event loop once, even at ``0``.
        jitter: Maximum absolute deviation applied to each segment's
            confidence.
        seed: Seed for the jitter RNG.
    """

    def __init__(
        self,
        classifier: Optional[ImageClassifier] = None,
        *,
        latency: float = 0.0,
        jitter: float = 0.02,
        seed: Optional[int] = None,
        bullish_words: Sequence[str] = DEFAULT_BULLISH_WORDS,
        bearish_words: Sequence[str] = DEFAULT_BEARISH_WORDS,
    ) -> None:
        self.classifier: ImageClassifier = classifier or PixelStatsClassifier()
        self.latency = max(0.0, float(latency))
        self.jitter = max(0.0, float(jitter))
        self.bullish_words = tuple(bullish_words)
        self.bearish_words = tuple(bearish_words)
        self._rng = random.Random(seed)
        self._busy = False

    @classmethod
    def from_config(cls, config, classifier: Optional[ImageClassifier] = None) -> "LocalOcrEngine":
        if classifier is None:
            classifier = PixelStatsClassifier(
                stride=config.sample_stride,
                threshold=config.intensity_threshold,
                cutoff=config.color_ratio_cutoff,
            )
        return cls(
            classifier,
            latency=config.ocr_latency,
            jitter=config.confidence_jitter,
            seed=config.seed,
            bullish_words=config.bullish_words,
            bearish_words=config.bearish_words,
        )

    @property
    def busy(self) -> bool:
        return self._busy

    async def process(self, image: ImageInput) -> OcrResult:
        if self._busy:
            error = BusyError("OCR engine is busy with another image")
            logger.warning("rejecting OCR request: %s", error)
            return OcrResult.failure(str(error))

        self._busy = True
        try:
            await asyncio.sleep(self.latency)
            return self._recognize(image)
        except ScoutLensError as exc:
            logger.warning("local OCR failed: %s", exc)
            return OcrResult.failure(str(exc))
        except Exception as exc:
            logger.exception("unexpected local OCR failure")
            return OcrResult.failure(f"OCR processing failed: {exc}")
        finally:
            self._busy = False

    def _recognize(self, image: ImageInput) -> OcrResult:
        scenario = self.classifier.classify(image)
        segments = self._layout(scenario.profile, image, scenario.confidence)
        full_text = " ".join(segment.text for segment in segments)

        text_sentiment = classify_sentiment(full_text, self.bullish_words, self.bearish_words).label
        sentiment = scenario.sentiment
        if (sentiment, text_sentiment) in _OPPOSITES:
            sentiment = Sentiment.MIXED

        return OcrResult(
            success=True,
            full_text=full_text,
            segments=segments,
            tokens_detected=extract_tokens(full_text),
            prices_detected=extract_prices(full_text),
            sentiment=sentiment,
            confidence=scenario.confidence,
            scenario=scenario.scenario,
        )

    def _layout(self, profile: ScenarioProfile, image: ImageInput, confidence: float) -> List[TextSegment]:
        segments: List[TextSegment] = []
        for kind, grid, texts in (
            (SegmentKind.TOKEN, _TOKEN_GRID, profile.tokens),
            (SegmentKind.PRICE, _PRICE_GRID, profile.prices),
        ):
            x0, y0, dx, dy, width, height = grid
            for index, text in enumerate(texts):
                box = NormalizedRect.from_pixels(
                    x0 + index * dx,
                    y0 + index * dy,
                    width,
                    height,
                    image_width=image.width,
                    image_height=image.height,
                )
                segments.append(
                    TextSegment(
                        text=text,
                        bounding_box=box,
                        confidence=self._jittered(confidence),
                        kind=kind,
                    )
                )
        return segments

    def _jittered(self, confidence: float) -> float:
        if self.jitter:
            confidence += self._rng.uniform(-self.jitter, self.jitter)
        return min(1.0, max(0.0, confidence))
