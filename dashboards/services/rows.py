"""
Read-only row snapshots handed from the query layer to the aggregators.

The aggregation functions only ever see these plain objects, never model
instances or querysets, so they can be exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from flock_management import egg_counts


@dataclass(frozen=True)
class FarmRow:
    id: str
    name: str
    male_count: int = 0
    female_count: int = 0
    manager_id: Optional[str] = None


@dataclass(frozen=True)
class ShedRow:
    id: str
    name: str
    farm_id: str
    farm_name: str
    capacity: int


@dataclass(frozen=True)
class ProductionRow:
    id: str
    farm_id: str
    farm_name: str
    date: date
    shed_id: Optional[str] = None
    shed_name: Optional[str] = None
    table_eggs: int = 0
    hatching_eggs: int = 0
    cracked_eggs: int = 0
    jumbo_eggs: int = 0
    leaker_eggs: int = 0
    total_eggs: int = 0
    broken_eggs: int = 0
    damaged_eggs: int = 0

    @property
    def total_daily_eggs(self) -> int:
        return egg_counts.total_eggs(self)

    @property
    def sellable_eggs(self) -> int:
        return egg_counts.sellable_eggs(self)

    @property
    def waste_eggs(self) -> int:
        return egg_counts.waste_eggs(self)

    @property
    def dashboard_eggs(self) -> int:
        return egg_counts.table_and_hatching(self)


@dataclass(frozen=True)
class MortalityRow:
    farm_id: str
    date: date
    male_mortality: int = 0
    female_mortality: int = 0


@dataclass(frozen=True)
class FlockRow:
    farm_id: str
    date: date
    shed_id: Optional[str] = None
    age_weeks: int = 0
    age_day_of_week: int = 1
    opening_male: int = 0
    opening_female: int = 0
    mortality_male: int = 0
    mortality_female: int = 0
    closing_male: int = 0
    closing_female: int = 0


@dataclass(frozen=True)
class AttendanceRow:
    user_id: str
    date: date
    status: str


@dataclass(frozen=True)
class WorkerRow:
    id: str
    name: str
    supervisor_id: Optional[str] = None
