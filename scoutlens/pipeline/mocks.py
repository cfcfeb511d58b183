"""Mock implementations of pipeline components for testing."""
from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

from ..errors import BackendUnavailableError
from .classifier import SCENARIO_PROFILES, SCENARIO_SENTIMENT
from .interfaces import BackendAnalyzer, ImageClassifier, TextSource
from .models import (
    BackendVerdict,
    ImageInput,
    OcrResult,
    Scenario,
    ScenarioResult,
    Signal,
)
from .patterns import classify_sentiment


class MockImageClassifier(ImageClassifier):
    def __init__(self, scenario: Scenario = Scenario.GAINS, confidence: Optional[float] = None) -> None:
        self.scenario = scenario
        self.confidence = confidence
        self.calls: List[ImageInput] = []

    def classify(self, image: ImageInput) -> ScenarioResult:
        self.calls.append(image)
        profile = SCENARIO_PROFILES[self.scenario]
        confidence = profile.confidence if self.confidence is None else self.confidence
        return ScenarioResult(
            scenario=self.scenario,
            sentiment=SCENARIO_SENTIMENT[self.scenario],
            confidence=confidence,
            profile=profile,
        )


class MockTextSource(TextSource):
    def __init__(self, text: str = "$SOL breakout to $98.45", *, fail_with: Optional[str] = None) -> None:
        self.text = text
        self.fail_with = fail_with
        self.calls: List[ImageInput] = []

    async def process(self, image: ImageInput) -> OcrResult:
        self.calls.append(image)
        await asyncio.sleep(0)
        if self.fail_with:
            return OcrResult.failure(self.fail_with)
        return OcrResult(success=True, full_text=self.text, confidence=0.9)


class MockBackendAnalyzer(BackendAnalyzer):
    """Scripted tier 1 analyzer.

    ``healthy`` drives :meth:`health_check`; ``fail`` makes every analysis
    raise :class:`BackendUnavailableError`.
    """

    def __init__(
        self,
        *,
        healthy: bool = True,
        fail: bool = False,
        verdict: Optional[BackendVerdict] = None,
        ocr_text: str = "$SOL looking bullish",
    ) -> None:
        self.healthy = healthy
        self.fail = fail
        self.verdict = verdict or BackendVerdict(success=True, detected_tokens=["SOL"], confidence=0.9)
        self.ocr_text = ocr_text
        self.health_calls = 0
        self.image_calls: List[ImageInput] = []
        self.text_calls: List[str] = []

    async def health_check(self) -> bool:
        self.health_calls += 1
        return self.healthy

    async def process_image(self, image: ImageInput) -> Tuple[Signal, BackendVerdict, str]:
        self.image_calls.append(image)
        if self.fail:
            raise BackendUnavailableError("mock backend unavailable")
        sentiment = classify_sentiment(self.ocr_text).label
        return Signal.from_verdict(self.verdict, sentiment=sentiment), self.verdict, self.ocr_text

    async def analyze_text(self, text: str) -> Tuple[Signal, BackendVerdict]:
        self.text_calls.append(text)
        if self.fail:
            raise BackendUnavailableError("mock backend unavailable")
        sentiment = classify_sentiment(text).label
        return Signal.from_verdict(self.verdict, sentiment=sentiment), self.verdict
