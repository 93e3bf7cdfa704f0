import random
import string
from datetime import datetime, timedelta, timezone

import pytest

from apiaggregator import types as internal
from apiaggregator import versioned
from apiaggregator.meta import GroupVersion, ListMeta, ObjectMeta, TypeMeta
from apiaggregator.scheme import (
    Scheme,
    add_internal_to_scheme,
    add_v1_to_scheme,
    install,
    v1_resource,
    v1beta1_resource,
)
from apiaggregator.types import ConditionStatus

GROUP = "apiregistration.eonvon.github.io"


@pytest.fixture
def scheme():
    result = Scheme()
    install(result)
    return result


def _text(rng):
    return "".join(rng.choice(string.ascii_lowercase) for _ in range(rng.randint(1, 8)))


def _time(rng):
    base = datetime(2020, 1, 1, tzinfo=timezone.utc)
    return base + timedelta(seconds=rng.randint(0, 10**8))


def _object_meta(rng):
    return ObjectMeta(
        name=_text(rng),
        generate_name=_text(rng),
        namespace=_text(rng),
        uid=_text(rng),
        resource_version=_text(rng),
        generation=rng.randint(1, 100),
        creation_timestamp=_time(rng),
        labels={_text(rng): _text(rng)},
        annotations={_text(rng): _text(rng)},
    )


def _api_service(rng):
    service = None
    if rng.random() < 0.7:
        service = versioned.ServiceReference(
            namespace=_text(rng),
            name=_text(rng),
            port=rng.choice([None, rng.randint(1, 65535)]),
        )
    conditions = [
        versioned.APIServiceCondition(
            type=_text(rng),
            status=rng.choice(list(ConditionStatus)),
            last_transition_time=_time(rng),
            reason=_text(rng),
            message=_text(rng),
        )
        for _ in range(rng.randint(0, 3))
    ]
    return versioned.APIService(
        metadata=_object_meta(rng),
        spec=versioned.APIServiceSpec(
            service=service,
            group=_text(rng),
            version=_text(rng),
            insecure_skip_tls_verify=rng.random() < 0.5,
            ca_bundle=bytes(rng.randint(0, 255) for _ in range(rng.randint(0, 16))),
            group_priority_minimum=rng.randint(-1000, 1000),
            version_priority=rng.randint(-1000, 1000),
        ),
        status=versioned.APIServiceStatus(conditions=conditions),
    )


def _api_service_list(rng):
    return versioned.APIServiceList(
        list_meta=ListMeta(
            resource_version=_text(rng),
            continue_=_text(rng),
            remaining_item_count=rng.choice([None, rng.randint(0, 50)]),
        ),
        items=[_api_service(rng) for _ in range(rng.randint(0, 3))],
    )


_FUZZERS = {"APIService": _api_service, "APIServiceList": _api_service_list}


@pytest.mark.parametrize("version", ["v1", "v1beta1"])
@pytest.mark.parametrize("kind_name", ["APIService", "APIServiceList"])
@pytest.mark.parametrize("seed", range(20))
def test_round_trip_to_unstructured(scheme, version, kind_name, seed):
    gvk = GroupVersion(GROUP, version).with_kind(kind_name)
    rng = random.Random(seed)
    obj = _FUZZERS[kind_name](rng)
    obj.type_meta = TypeMeta(api_version=f"{GROUP}/{version}", kind=kind_name)

    data = scheme.to_unstructured(obj)
    assert data["apiVersion"] == f"{GROUP}/{version}"
    assert data["kind"] == kind_name

    restored = scheme.from_unstructured(data)
    assert restored == obj
    assert scheme.object_kinds(restored)[0].kind == gvk.kind


def test_install_recognizes_all_kinds(scheme):
    for version in ("v1", "v1beta1", "__internal"):
        for kind_name in ("APIService", "APIServiceList"):
            assert scheme.recognizes(GroupVersion(GROUP, version).with_kind(kind_name))
    assert not scheme.recognizes(GroupVersion(GROUP, "v2").with_kind("APIService"))


def test_prioritized_versions(scheme):
    assert scheme.prioritized_versions_for_group(GROUP) == [
        GroupVersion(GROUP, "v1"),
        GroupVersion(GROUP, "v1beta1"),
    ]
    assert scheme.prioritized_versions_for_group("other") == []


def test_prioritized_versions_follow_observed_order_without_priority():
    scheme = Scheme()
    add_internal_to_scheme(scheme)
    add_v1_to_scheme(scheme)
    assert scheme.prioritized_versions_for_group(GROUP) == [GroupVersion(GROUP, "v1")]


def test_set_version_priority_rejects_mixed_groups(scheme):
    with pytest.raises(ValueError):
        scheme.set_version_priority(GroupVersion("a", "v1"), GroupVersion("b", "v1"))


def test_set_version_priority_rejects_internal(scheme):
    with pytest.raises(ValueError):
        scheme.set_version_priority(GroupVersion(GROUP, "__internal"))


def test_set_version_priority_rejects_nothing(scheme):
    with pytest.raises(ValueError):
        scheme.set_version_priority()


def test_object_kinds(scheme):
    kinds = scheme.object_kinds(versioned.APIService())
    assert kinds == [
        GroupVersion(GROUP, "v1").with_kind("APIService"),
        GroupVersion(GROUP, "v1beta1").with_kind("APIService"),
    ]
    assert scheme.object_kinds(internal.APIService()) == [
        GroupVersion(GROUP, "__internal").with_kind("APIService")
    ]


def test_object_kinds_unknown_type(scheme):
    with pytest.raises(LookupError):
        scheme.object_kinds(object())


def test_new(scheme):
    obj = scheme.new(GroupVersion(GROUP, "v1beta1").with_kind("APIServiceList"))
    assert obj == versioned.APIServiceList()
    with pytest.raises(LookupError):
        scheme.new(GroupVersion(GROUP, "v9").with_kind("APIService"))


def test_default_sets_service_port(scheme):
    obj = versioned.APIService(
        spec=versioned.APIServiceSpec(service=versioned.ServiceReference(name="svc"))
    )
    scheme.default(obj)
    assert obj.spec.service.port == 443


def test_default_applies_to_list_items(scheme):
    items = [
        versioned.APIService(
            spec=versioned.APIServiceSpec(service=versioned.ServiceReference(port=8443))
        ),
        versioned.APIService(spec=versioned.APIServiceSpec(service=versioned.ServiceReference())),
    ]
    obj = versioned.APIServiceList(items=items)
    scheme.default(obj)
    assert [item.spec.service.port for item in obj.items] == [8443, 443]


def test_to_unstructured_prefers_v1(scheme):
    data = scheme.to_unstructured(versioned.APIService())
    assert data["apiVersion"] == f"{GROUP}/v1"
    assert data["kind"] == "APIService"


def test_to_unstructured_rejects_mismatched_type_meta(scheme):
    obj = versioned.APIService(type_meta=TypeMeta(api_version=f"{GROUP}/v1", kind="APIServiceList"))
    with pytest.raises(ValueError):
        scheme.to_unstructured(obj)


def test_to_unstructured_internal_type_has_no_form(scheme):
    with pytest.raises(TypeError):
        scheme.to_unstructured(internal.APIService())


def test_from_unstructured_unknown_kind(scheme):
    with pytest.raises(LookupError):
        scheme.from_unstructured({"apiVersion": f"{GROUP}/v1", "kind": "Unknown"})


def test_from_unstructured_missing_kind(scheme):
    with pytest.raises(ValueError):
        scheme.from_unstructured({"apiVersion": f"{GROUP}/v1"})


def test_from_unstructured_bad_api_version(scheme):
    with pytest.raises(ValueError):
        scheme.from_unstructured({"apiVersion": "a/b/c", "kind": "APIService"})


def test_double_registration_conflict():
    scheme = Scheme()
    add_v1_to_scheme(scheme)

    class APIService:
        pass

    with pytest.raises(ValueError):
        scheme.add_known_types(GroupVersion(GROUP, "v1"), APIService)


def test_resources():
    assert str(v1_resource("apiservices")) == f"apiservices.{GROUP}"
    assert v1beta1_resource("apiservices").group == GROUP
    assert v1beta1_resource("apiservices").resource == "apiservices"