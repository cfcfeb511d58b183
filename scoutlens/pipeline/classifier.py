"""Pixel-statistics scenario classifier.

This is a coarse stand-in for real content understanding: a screenshot that
is mostly green is treated as a "gains" screen, mostly red as "losses", and
anything else as a portfolio view. Each scenario reports a canned profile
from :data:`SCENARIO_PROFILES`, so a real OCR/vision model can replace the
table (or the whole classifier) without touching the engine's control flow.
"""
from __future__ import annotations

import logging
from typing import Dict, Tuple

import numpy as np
from PIL import Image

from ..errors import DecodeError
from .interfaces import ImageClassifier
from .models import ImageInput, Scenario, ScenarioProfile, ScenarioResult, Sentiment

logger = logging.getLogger(__name__)

SCENARIO_PROFILES: Dict[Scenario, ScenarioProfile] = {
    Scenario.GAINS: ScenarioProfile(
        tokens=["SOL", "JUP", "BONK"],
        prices=["$98.45", "+5.2%", "$1.84"],
        social_signals=["📈", "bullish", "moon"],
        confidence=0.85,
    ),
    Scenario.LOSSES: ScenarioProfile(
        tokens=["SOL", "ETH", "BTC"],
        prices=["$89.12", "-3.1%", "$41,200"],
        social_signals=["📉", "bearish", "dip"],
        confidence=0.78,
    ),
    Scenario.PORTFOLIO: ScenarioProfile(
        tokens=["SOL", "JUP", "BONK", "WIF"],
        prices=["12.5 SOL", "850 JUP", "2.5M BONK"],
        social_signals=["Portfolio", "Holdings", "Balance"],
        confidence=0.82,
    ),
}

SCENARIO_SENTIMENT: Dict[Scenario, Sentiment] = {
    Scenario.GAINS: Sentiment.BULLISH,
    Scenario.LOSSES: Sentiment.BEARISH,
    Scenario.PORTFOLIO: Sentiment.NEUTRAL,
}


def _rgb_array(image: ImageInput) -> np.ndarray:
    raster = image.image
    if not isinstance(raster, Image.Image):
        raise DecodeError("PixelStatsClassifier expects a PIL.Image raster")
    try:
        return np.asarray(raster.convert("RGB"), dtype=np.int16)
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Could not decode image pixels: {exc}") from exc


class PixelStatsClassifier(ImageClassifier):
    """Classify screenshots by their share of strongly green/red pixels.

    Args:
        stride: Only every ``stride``-th pixel (in row-major order) is
            inspected.
        threshold: Minimum channel intensity for a pixel to count as green
            or red.
        cutoff: Ratio of coloured sampled pixels above which a scenario is
            chosen.
        profiles: Scenario to canned profile table.
    """

    def __init__(
        self,
        stride: int = 4,
        threshold: int = 150,
        cutoff: float = 0.1,
        profiles: Dict[Scenario, ScenarioProfile] | None = None,
    ) -> None:
        if stride < 1:
            raise ValueError("stride must be >= 1")
        self.stride = stride
        self.threshold = threshold
        self.cutoff = cutoff
        self.profiles = dict(profiles or SCENARIO_PROFILES)

    def color_ratios(self, image: ImageInput) -> Tuple[float, float]:
        pixels = _rgb_array(image).reshape(-1, 3)[:: self.stride]
        if pixels.size == 0:
            raise DecodeError("Image has no pixels to sample")

        r, g, b = pixels[:, 0], pixels[:, 1], pixels[:, 2]
        green = np.count_nonzero((g > r) & (g > b) & (g > self.threshold))
        red = np.count_nonzero((r > g) & (r > b) & (r > self.threshold))
        sampled = len(pixels)
        return green / sampled, red / sampled

    def classify(self, image: ImageInput) -> ScenarioResult:
        green_ratio, red_ratio = self.color_ratios(image)

        if green_ratio > self.cutoff:
            scenario = Scenario.GAINS
        elif red_ratio > self.cutoff:
            scenario = Scenario.LOSSES
        else:
            scenario = Scenario.PORTFOLIO

        profile = self.profiles[scenario]
        logger.debug(
            "classified image %dx%d as %s (green=%.3f red=%.3f)",
            image.width,
            image.height,
            scenario.value,
            green_ratio,
            red_ratio,
        )
        return ScenarioResult(
            scenario=scenario,
            sentiment=SCENARIO_SENTIMENT[scenario],
            confidence=profile.confidence,
            green_ratio=float(green_ratio),
            red_ratio=float(red_ratio),
            profile=profile,
        )
