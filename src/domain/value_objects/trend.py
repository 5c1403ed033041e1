from __future__ import annotations

from enum import Enum


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
