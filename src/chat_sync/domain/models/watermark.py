"""Watermark observation result."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ObserveResult:
    """Outcome of offering a candidate timestamp to the watermark store."""

    is_new: bool
    watermark: datetime | None
    bootstrapped: bool = False
