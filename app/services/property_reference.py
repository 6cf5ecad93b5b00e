"""Property references carried by proposals and their per-conversion lookup.

A proposal created against a lead cannot point at a real property yet, so
its ``property_id`` column holds one of several shapes: a real property id,
a legacy ``project-<index>`` token, or the id of a project embedded in the
lead. The proposal may also carry the project's street address in
``project_address``. Each shape is modelled as its own reference type and
resolved through one ``ProjectLookup`` built when the lead's projects are
materialised as properties.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
PROJECT_INDEX_RE = re.compile(r"^project-(\d+)$")

ADDRESS_PARTS = ("address", "address_line_2", "city", "state", "zip")


@dataclass(frozen=True)
class ByAddress:
    address: str


@dataclass(frozen=True)
class ByProjectIndex:
    index: int


@dataclass(frozen=True)
class ByProjectId:
    project_id: str


@dataclass(frozen=True)
class ByPropertyId:
    property_id: str


PropertyReference = Union[ByAddress, ByProjectIndex, ByProjectId, ByPropertyId]


def is_uuid(value: str | None) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def parse_project_index(value: str | None) -> int | None:
    """Return N for a ``project-N`` token, else None."""
    if not value:
        return None
    match = PROJECT_INDEX_RE.match(value.strip())
    return int(match.group(1)) if match else None


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def has_address(project: Mapping[str, Any]) -> bool:
    return bool(_clean(project.get("address")))


def compose_full_address(project: Mapping[str, Any]) -> str:
    """Join street, line 2, city, state and zip with ", ", skipping blanks."""
    parts = [_clean(project.get(key)) for key in ADDRESS_PARTS]
    return ", ".join(part for part in parts if part)


def candidate_references(project_address: str | None, property_id: str | None) -> list[PropertyReference]:
    """Build the references a proposal can be matched by, in priority order.

    The order is fixed: stored project address, then a ``project-N`` token,
    then any other non-UUID value read as a project id. A UUID is kept as a
    direct property reference and only resolves to properties created in
    the same conversion.
    """
    refs: list[PropertyReference] = []
    if project_address:
        refs.append(ByAddress(project_address))
    index = parse_project_index(property_id)
    if index is not None:
        refs.append(ByProjectIndex(index))
    if property_id:
        if is_uuid(property_id):
            refs.append(ByPropertyId(property_id))
        else:
            refs.append(ByProjectId(property_id))
    return refs


class ProjectLookup:
    """Resolve property references against one lead's projects."""

    def __init__(
        self,
        projects: Sequence[Mapping[str, Any]] | None,
        address_to_property: Mapping[str, str],
    ) -> None:
        # Non-mapping entries keep their slot so project-N indexes still line up.
        self._projects = [
            project if isinstance(project, Mapping) else None for project in projects or []
        ]
        self._address_to_property = dict(address_to_property)
        self._property_ids = set(self._address_to_property.values())

    def _project_at(self, index: int) -> Mapping[str, Any] | None:
        if 0 <= index < len(self._projects):
            return self._projects[index]
        return None

    def project_for(self, ref: PropertyReference) -> Mapping[str, Any] | None:
        """Return the lead project a reference points at, if any."""
        if isinstance(ref, ByProjectIndex):
            return self._project_at(ref.index)
        if isinstance(ref, ByProjectId):
            for project in self._projects:
                if project is None:
                    continue
                if project.get("id") is not None and str(project.get("id")) == ref.project_id:
                    return project
            index = parse_project_index(ref.project_id)
            return self._project_at(index) if index is not None else None
        return None

    def resolve(self, ref: PropertyReference) -> str | None:
        """Return the property id a single reference maps to, or None."""
        if isinstance(ref, ByAddress):
            return self._address_to_property.get(ref.address)
        if isinstance(ref, ByPropertyId):
            return ref.property_id if ref.property_id in self._property_ids else None
        project = self.project_for(ref)
        if project is None or not project.get("address"):
            return None
        return self._address_to_property.get(project["address"])

    def resolve_first(self, refs: Iterable[PropertyReference]) -> tuple[PropertyReference | None, str | None]:
        for ref in refs:
            property_id = self.resolve(ref)
            if property_id:
                return ref, property_id
        return None, None
