"""Domain entity for a monitored fish population (cage)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class Population:
    """A physically distinct group of reared fish.

    Read-only to the forecasting engine; owned by the record-keeping system.
    """

    id: str
    site_id: Optional[str] = None
    name: Optional[str] = None
    active: bool = True
