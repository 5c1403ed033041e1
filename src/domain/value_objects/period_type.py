from __future__ import annotations

from enum import Enum


class PeriodType(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
