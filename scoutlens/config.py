# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Runtime configuration for the signal pipeline."""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .api_spec import DEFAULT_BACKEND_URL
from .resources.lexicon import DEFAULT_BEARISH_WORDS, DEFAULT_BULLISH_WORDS

__all__ = ["PipelineConfig", "DEFAULT_BACKEND_URL"]


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_words(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    words = tuple(part.strip().lower() for part in raw.split(",") if part.strip())
    return words or default


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings shared by every tier of the pipeline.

    Instances are immutable; use :meth:`with_overrides` to derive variants.
    """

    backend_url: str = DEFAULT_BACKEND_URL
    backend_timeout: float = 5.0
    health_message: str = "health check"

    ocr_latency: float = 0.0
    confidence_jitter: float = 0.02
    seed: Optional[int] = None

    sample_stride: int = 4
    intensity_threshold: int = 150
    color_ratio_cutoff: float = 0.1

    low_confidence_threshold: float = 0.6
    high_priority_confidence: float = 0.8

    bullish_words: Tuple[str, ...] = DEFAULT_BULLISH_WORDS
    bearish_words: Tuple[str, ...] = DEFAULT_BEARISH_WORDS

    @classmethod
    def from_env(cls, prefix: str = "SCOUTLENS_") -> "PipelineConfig":
        """Build a config from ``SCOUTLENS_*`` variables; bad values keep defaults."""

        base = cls()
        timeout = _env_float(f"{prefix}BACKEND_TIMEOUT", base.backend_timeout)
        stride = _env_int(f"{prefix}SAMPLE_STRIDE", base.sample_stride) or base.sample_stride
        return cls(
            backend_url=_env_str(f"{prefix}BACKEND_URL", base.backend_url),
            backend_timeout=timeout if timeout > 0 else base.backend_timeout,
            health_message=_env_str(f"{prefix}HEALTH_MESSAGE", base.health_message),
            ocr_latency=max(0.0, _env_float(f"{prefix}OCR_LATENCY", base.ocr_latency)),
            confidence_jitter=max(0.0, _env_float(f"{prefix}CONFIDENCE_JITTER", base.confidence_jitter)),
            seed=_env_int(f"{prefix}SEED", base.seed),
            sample_stride=max(1, stride),
            intensity_threshold=_env_int(f"{prefix}INTENSITY_THRESHOLD", base.intensity_threshold)
            or base.intensity_threshold,
            color_ratio_cutoff=_env_float(f"{prefix}COLOR_RATIO_CUTOFF", base.color_ratio_cutoff),
            low_confidence_threshold=_env_float(
                f"{prefix}LOW_CONFIDENCE_THRESHOLD", base.low_confidence_threshold
            ),
            high_priority_confidence=_env_float(
                f"{prefix}HIGH_PRIORITY_CONFIDENCE", base.high_priority_confidence
            ),
            bullish_words=_env_words(f"{prefix}BULLISH_WORDS", base.bullish_words),
            bearish_words=_env_words(f"{prefix}BEARISH_WORDS", base.bearish_words),
        )

    def with_overrides(self, **changes: Any) -> "PipelineConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.
        """
        return asdict(self)
