# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Pytest configuration shared across the suite."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest
from PIL import Image


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def solid_image(color, size=(64, 48)) -> Image.Image:
    return Image.new("RGB", size, color)


@pytest.fixture
def green_image() -> Image.Image:
    return solid_image((20, 200, 40))


@pytest.fixture
def red_image() -> Image.Image:
    return solid_image((210, 30, 30))


@pytest.fixture
def grey_image() -> Image.Image:
    return solid_image((90, 90, 90))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("SCOUTLENS_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("scoutlens")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
