"""Ordering and condition helpers for v1 APIService objects."""

from __future__ import annotations

from typing import Iterable, List, Optional

from apiaggregator import helpers
from apiaggregator.meta import GroupVersion, now
from apiaggregator.types import AVAILABLE, ConditionStatus
from apiaggregator.versioned import APIService, APIServiceCondition


def sorted_by_group_and_version(api_services: Iterable[APIService]) -> List[List[APIService]]:
    """Split services into groups ordered by group priority, each ordered by version."""
    return helpers.sorted_by_group_and_version(api_services)


def api_service_name_to_group_version(api_service_name: str) -> GroupVersion:
    """Return the group version named by an APIService name of the form "version.group"."""
    version, separator, group = api_service_name.partition(".")
    if not separator:
        raise ValueError(f"APIService name {api_service_name!r} is not of the form version.group")
    return GroupVersion(group=group, version=version)


def new_local_available_api_service_condition() -> APIServiceCondition:
    """Return the condition for an always-available local APIService."""
    return APIServiceCondition(
        type=AVAILABLE,
        status=ConditionStatus.TRUE,
        last_transition_time=now(),
        reason="Local",
        message="Local APIServices are always available",
    )


def get_api_service_condition_by_type(
    api_service: APIService, condition_type: str
) -> Optional[APIServiceCondition]:
    """Return the service's condition of the given type, or None."""
    return helpers.get_api_service_condition_by_type(api_service, condition_type)


def set_api_service_condition(api_service: APIService, new_condition: APIServiceCondition) -> None:
    """Overwrite the condition of the same type, or add it if there is none."""
    helpers.set_api_service_condition(api_service, new_condition)


def is_api_service_condition_true(api_service: APIService, condition_type: str) -> bool:
    """Tell whether the condition is present and strictly true."""
    return helpers.is_api_service_condition_true(api_service, condition_type)