from dataclasses import replace
from datetime import datetime, timezone

import pytest

from apiaggregator.meta import GroupVersion
from apiaggregator.types import ConditionStatus
from apiaggregator.v1helper import (
    api_service_name_to_group_version,
    get_api_service_condition_by_type,
    is_api_service_condition_true,
    new_local_available_api_service_condition,
    set_api_service_condition,
    sorted_by_group_and_version,
)
from apiaggregator.versioned import (
    AVAILABLE,
    APIService,
    APIServiceCondition,
    APIServiceSpec,
    APIServiceStatus,
)

A = "A"
B = "B"


def make_api_service(version, priority, *conditions):
    return APIService(
        spec=APIServiceSpec(version=version, version_priority=priority),
        status=APIServiceStatus(conditions=[replace(c) for c in conditions]),
    )


def make_condition(condition_type, reason, message, status):
    return APIServiceCondition(type=condition_type, reason=reason, message=message, status=status)


@pytest.mark.parametrize(
    "conditions, expected",
    [
        ([], False),
        ([make_condition(A, "a reason", "a message", ConditionStatus.FALSE)], False),
        ([make_condition(A, "a reason", "a message", ConditionStatus.TRUE)], True),
    ],
)
def test_is_api_service_condition_true(conditions, expected):
    service = make_api_service("v1", 100, *conditions)
    assert is_api_service_condition_true(service, A) is expected


def test_set_new_condition():
    condition_a1 = make_condition(A, "a1 reason", "a1 message", ConditionStatus.TRUE)
    service = make_api_service("v1", 100)
    assert get_api_service_condition_by_type(service, A) is None
    set_api_service_condition(service, condition_a1)
    assert get_api_service_condition_by_type(service, A) == condition_a1


def test_set_overrides_existing_condition():
    condition_a1 = make_condition(A, "a1 reason", "a1 message", ConditionStatus.TRUE)
    condition_a2 = make_condition(A, "a2 reason", "a2 message", ConditionStatus.TRUE)
    service = make_api_service("v1", 100, condition_a1)
    assert get_api_service_condition_by_type(service, A) == condition_a1
    set_api_service_condition(service, condition_a2)
    assert get_api_service_condition_by_type(service, A) == condition_a2
    assert len(service.status.conditions) == 1


def test_set_keeps_transition_time_when_status_unchanged():
    early = datetime(2021, 1, 1, tzinfo=timezone.utc)
    late = datetime(2022, 1, 1, tzinfo=timezone.utc)
    first = APIServiceCondition(type=A, status=ConditionStatus.TRUE, last_transition_time=early)
    service = make_api_service("v1", 100, first)
    set_api_service_condition(
        service, APIServiceCondition(type=A, status=ConditionStatus.TRUE, last_transition_time=late)
    )
    assert get_api_service_condition_by_type(service, A).last_transition_time == early
    set_api_service_condition(
        service, APIServiceCondition(type=A, status=ConditionStatus.FALSE, last_transition_time=late)
    )
    assert get_api_service_condition_by_type(service, A).last_transition_time == late


@pytest.mark.parametrize(
    "versions, expected",
    [
        (["v1", "v2"], ["v2", "v1"]),
        (["v2", "v10"], ["v10", "v2"]),
        (
            ["v2", "v2beta1", "v10beta2", "v10beta1", "v10alpha1", "v1"],
            ["v2", "v1", "v10beta2", "v10beta1", "v2beta1", "v10alpha1"],
        ),
        (
            ["v1", "v2", "test", "foo10", "final", "foo2", "foo1"],
            ["v2", "v1", "final", "foo1", "foo10", "foo2", "test"],
        ),
        (
            ["v12alpha1", "v10", "v11beta2", "v10beta3", "v3beta1", "v2", "v11alpha2", "foo1", "v1", "foo10"],
            ["v10", "v2", "v1", "v11beta2", "v10beta3", "v3beta1", "v12alpha1", "v11alpha2", "foo1", "foo10"],
        ),
    ],
)
def test_sorted_by_group_and_version(versions, expected):
    services = [make_api_service(version, 100) for version in versions]
    result = sorted_by_group_and_version(services)
    assert [service.spec.version for service in result[0]] == expected


def test_get_condition_by_type_finds_match():
    condition_a = make_condition(A, "a reason", "a message", ConditionStatus.TRUE)
    condition_b = make_condition(B, "b reason", "b message", ConditionStatus.TRUE)
    service = make_api_service("v1", 100, condition_a, condition_b)
    assert get_api_service_condition_by_type(service, A) == condition_a


def test_get_condition_by_type_without_match():
    condition_a = make_condition(A, "a reason", "a message", ConditionStatus.TRUE)
    service = make_api_service("v1", 100, condition_a)
    assert get_api_service_condition_by_type(service, B) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("v1.apiregistration.eonvon.github.io", GroupVersion("apiregistration.eonvon.github.io", "v1")),
        ("v1alphav1.k8s.io", GroupVersion("k8s.io", "v1alphav1")),
        ("v1.core", GroupVersion("core", "v1")),
    ],
)
def test_api_service_name_to_group_version(name, expected):
    assert api_service_name_to_group_version(name) == expected


def test_api_service_name_without_group():
    with pytest.raises(ValueError):
        api_service_name_to_group_version("v1")


def test_new_local_available_api_service_condition():
    condition = new_local_available_api_service_condition()
    assert condition.status == ConditionStatus.TRUE
    assert condition.type == AVAILABLE
    assert condition.reason == "Local"
    assert condition.message == "Local APIServices are always available"
    assert isinstance(condition, APIServiceCondition)
    assert condition.last_transition_time.tzinfo == timezone.utc