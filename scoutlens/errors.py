# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Exception taxonomy for the signal pipeline.

Components raise these internally; the public pipeline surface converts them
into ``success=False`` result objects.
"""

from __future__ import annotations

__all__ = [
    "ScoutLensError",
    "BusyError",
    "BackendUnavailableError",
    "NoEngineAvailableError",
    "DecodeError",
]


class ScoutLensError(RuntimeError):
    """Base class for pipeline failures."""


class BusyError(ScoutLensError):
    """The OCR engine is already processing another image."""


class BackendUnavailableError(ScoutLensError):
    """The analysis backend could not be reached or rejected the request."""


class NoEngineAvailableError(ScoutLensError):
    """Neither the backend tier nor the local tier is wired up."""


class DecodeError(ScoutLensError):
    """An image could not be read or classified."""
