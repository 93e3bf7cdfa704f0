"""Ordering and condition helpers for internal APIService objects."""

from __future__ import annotations

import re
from dataclasses import replace
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Tuple

from apiaggregator.meta import now
from apiaggregator.types import (
    AVAILABLE,
    APIService,
    APIServiceCondition,
    ConditionStatus,
)

_KUBE_VERSION = re.compile(r"v([0-9]+)(?:(alpha|beta)([0-9]+))?")
_VERSION_TYPE_RANK = {"alpha": 0, "beta": 1, None: 2}


def _parse_kube_version(version: str) -> Optional[Tuple[int, int, int]]:
    match = _KUBE_VERSION.fullmatch(version)
    if match is None:
        return None
    major, stage, minor = match.groups()
    return int(major), _VERSION_TYPE_RANK[stage], int(minor) if minor else 0


def compare_kube_aware_version_strings(v1: str, v2: str) -> int:
    """Compare two version strings; a positive result means v1 sorts first.

    Kube-like versions (v1, v2beta1, v3alpha2) rank above all others, GA above
    beta above alpha, then by major and minor number. Other strings are ordered
    lexicographically, earlier strings ranking higher.
    """
    if v1 == v2:
        return 0
    parsed1 = _parse_kube_version(v1)
    parsed2 = _parse_kube_version(v2)
    if parsed1 is None and parsed2 is None:
        return (v2 > v1) - (v2 < v1)
    if parsed1 is None:
        return -1
    if parsed2 is None:
        return 1
    major1, rank1, minor1 = parsed1
    major2, rank2, minor2 = parsed2
    if rank1 != rank2:
        return rank1 - rank2
    if major1 != major2:
        return major1 - major2
    return minor1 - minor2


def sort_by_group_priority_minimum(api_services: Iterable[APIService]) -> List[APIService]:
    """Return the services with the highest group priority first, then by name."""
    return sorted(api_services, key=lambda s: (-s.spec.group_priority_minimum, s.name))


def _version_order(left: APIService, right: APIService) -> int:
    if left.spec.version_priority != right.spec.version_priority:
        return right.spec.version_priority - left.spec.version_priority
    return -compare_kube_aware_version_strings(left.spec.version, right.spec.version)


def sort_by_version_priority(api_services: Iterable[APIService]) -> List[APIService]:
    """Return the services with the highest version priority first, then by version."""
    return sorted(api_services, key=cmp_to_key(_version_order))


def sorted_by_group_and_version(api_services: Iterable[APIService]) -> List[List[APIService]]:
    """Split services into groups ordered by group priority, each ordered by version.

    The first element of the first list is the highest version of the highest
    priority group; the last element of the last list is the lowest version of
    the lowest priority group.
    """
    groups: Dict[str, List[APIService]] = {}
    for service in sort_by_group_priority_minimum(api_services):
        groups.setdefault(service.spec.group, []).append(service)
    return [sort_by_version_priority(members) for members in groups.values()]


def get_api_service_condition_by_type(
    api_service: APIService, condition_type: str
) -> Optional[APIServiceCondition]:
    """Return the service's condition of the given type, or None."""
    return next(
        (c for c in api_service.status.conditions if c.type == condition_type), None
    )


def set_api_service_condition(api_service: APIService, new_condition: APIServiceCondition) -> None:
    """Overwrite the condition of the same type, or add it if there is none.

    The transition time only changes when the status does.
    """
    existing = get_api_service_condition_by_type(api_service, new_condition.type)
    if existing is None:
        api_service.status.conditions.append(replace(new_condition))
        return
    if existing.status != new_condition.status:
        existing.status = new_condition.status
        existing.last_transition_time = new_condition.last_transition_time
    existing.reason = new_condition.reason
    existing.message = new_condition.message


def is_api_service_condition_true(api_service: APIService, condition_type: str) -> bool:
    """Tell whether the condition is present and strictly true."""
    condition = get_api_service_condition_by_type(api_service, condition_type)
    return condition is not None and condition.status == ConditionStatus.TRUE


def new_local_available_api_service_condition() -> APIServiceCondition:
    """Return the condition for an always-available local APIService."""
    return APIServiceCondition(
        type=AVAILABLE,
        status=ConditionStatus.TRUE,
        last_transition_time=now(),
        reason="Local",
        message="Local APIServices are always available",
    )