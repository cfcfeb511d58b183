# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Interfaces for signal pipeline components."""
from __future__ import annotations

from typing import Protocol, Tuple

from .models import BackendVerdict, ImageInput, OcrResult, ScenarioResult, Signal


class ImageClassifier(Protocol):
    def classify(self, image: ImageInput) -> ScenarioResult:
        ...


class TextSource(Protocol):
    async def process(self, image: ImageInput) -> OcrResult:
        ...


class BackendAnalyzer(Protocol):
    async def health_check(self) -> bool:
        ...

    async def process_image(self, image: ImageInput) -> Tuple[Signal, BackendVerdict, str]:
        ...

    async def analyze_text(self, text: str) -> Tuple[Signal, BackendVerdict]:
        ...
