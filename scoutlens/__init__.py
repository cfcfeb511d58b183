# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""ScoutLens public package surface."""

from __future__ import annotations

from ._version import __version__
from .config import PipelineConfig
from .errors import (
    BackendUnavailableError,
    BusyError,
    DecodeError,
    NoEngineAvailableError,
    ScoutLensError,
)
from .pipeline import PipelineResult, ScoutLensPipeline

__all__ = [
    "BackendUnavailableError",
    "BusyError",
    "DecodeError",
    "NoEngineAvailableError",
    "PipelineConfig",
    "PipelineResult",
    "ScoutLensError",
    "ScoutLensPipeline",
    "__version__",
]
