"""
Scenario (budget version) record

A scenario is an independent, fully isolated copy of every entry and rate.
"""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    description: str = ""
    is_active: bool = False
    created_at: datetime | None = None
