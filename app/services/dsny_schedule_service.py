"""DSNY collection schedule lookup for maintenance-visit planning.

Maintenance crews put out bins the day before each DSNY pickup, so pickup
weekdays are shifted back one day (Sunday wraps to Saturday). Days are
numbered Sunday=0 through Saturday=6.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

import requests

from app.core.config import get_config
from app.core.enums import CollectionType

logger = logging.getLogger(__name__)

DAY_NUMBERS = {
    "Sunday": 0,
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
}

SCHEDULE_FIELDS = {
    CollectionType.GARBAGE: "RegularCollectionSchedule",
    CollectionType.RECYCLING: "RecyclingCollectionSchedule",
    CollectionType.ORGANICS: "OrganicsCollectionSchedule",
    CollectionType.BULK: "BulkPickupCollectionSchedule",
}

SIMULATED_ZONES = (
    ("Zone 1 (Tuesday, Friday)", (2, 5)),
    ("Zone 2 (Monday, Thursday)", (1, 4)),
    ("Zone 3 (Wednesday, Saturday)", (3, 6)),
)


def parse_collection_days(value: str | None) -> list[int]:
    """Turn "Monday, Thursday" into [1, 4]; unknown names are dropped."""
    if not value or not isinstance(value, str):
        return []
    days = []
    for name in value.split(","):
        day = DAY_NUMBERS.get(name.strip())
        if day is not None:
            days.append(day)
    return days


def to_maintenance_days(pickup_days: list[int]) -> list[int]:
    return [6 if day == 0 else day - 1 for day in pickup_days]


def _today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class CollectionSchedule:
    address: str
    zone: str
    schedules: dict[str, list[int]] = field(default_factory=dict)
    next_pickup: date | None = None
    simulated: bool = False

    def days_for(self, collection_type: CollectionType | str) -> list[int]:
        key = collection_type.value if isinstance(collection_type, CollectionType) else collection_type
        return list(self.schedules.get(key, []))

    def combined_days(self) -> list[int]:
        """Unique maintenance days across every collection type, first seen first."""
        seen: list[int] = []
        for collection_type in CollectionType:
            for day in self.days_for(collection_type):
                if day not in seen:
                    seen.append(day)
        return seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "zone": self.zone,
            "schedules": {key: list(days) for key, days in self.schedules.items()},
            "combined_days": self.combined_days(),
            "next_pickup": self.next_pickup.isoformat() if self.next_pickup else None,
            "simulated": self.simulated,
        }


class DSNYScheduleService:
    """Fetch DSNY pickup days for an address, simulating a zone when the API is down."""

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        config = get_config()
        self.api_url = api_url or config.DSNY_API_URL
        self.timeout = timeout or config.DSNY_TIMEOUT_SECONDS
        self.rng = rng or random.Random()

    def fetch_pickup_schedule(self, address: str) -> CollectionSchedule:
        try:
            response = requests.get(
                self.api_url,
                params={"address": address},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("DSNY response is not a JSON object")
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.warning(
                "dsny.schedule.fetch_failed",
                extra={"event": "dsny.schedule.fetch_failed", "address": address, "error": str(exc)},
            )
            return self.simulate_schedule(address)

        schedule = self.parse_response(address, data)
        logger.info(
            "dsny.schedule.fetched",
            extra={"event": "dsny.schedule.fetched", "address": address, "zone": schedule.zone},
        )
        return schedule

    def parse_response(self, address: str, data: dict[str, Any]) -> CollectionSchedule:
        schedules = {
            collection_type.value: to_maintenance_days(parse_collection_days(data.get(field_name)))
            for collection_type, field_name in SCHEDULE_FIELDS.items()
        }
        return CollectionSchedule(
            address=address,
            zone=data.get("Zone") or "Unknown Zone",
            schedules=schedules,
            next_pickup=_today() + timedelta(days=1),
        )

    def simulate_schedule(self, address: str) -> CollectionSchedule:
        zone, pickup_days = self.rng.choice(SIMULATED_ZONES)
        maintenance_days = to_maintenance_days(list(pickup_days))
        return CollectionSchedule(
            address=address,
            zone=zone,
            schedules={
                CollectionType.GARBAGE.value: list(maintenance_days),
                CollectionType.RECYCLING.value: list(maintenance_days),
                CollectionType.ORGANICS.value: [],
                CollectionType.BULK.value: [],
            },
            next_pickup=_today() + timedelta(days=int(self.rng.random() * 7)),
            simulated=True,
        )
