# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Utility helpers shared across the ScoutLens package."""

from .log_utils import JsonFormatter, configure_logging

__all__ = ["JsonFormatter", "configure_logging"]
