# apiaggregator

Data types and helpers for registering API group versions with an aggregating
API server.

An `APIService` tells the aggregator which server handles a particular
group/version. Its name must be `<version>.<group>`. A spec with no `service`
is handled locally.

## Installation

```
pip install apiaggregator
```

The package has no dependencies outside the standard library.

## What is in the package

- `apiaggregator.meta`: common metadata (`TypeMeta`, `ObjectMeta`, `ListMeta`,
  each with `to_dict` / `from_dict`), group/version identifiers
  (`GroupVersion`, `GroupKind`, `GroupResource`, `GroupVersionKind`,
  `GroupVersionResource`) and `now()`, the current UTC time to the second.
- `apiaggregator.types`: the internal `APIService` model (`APIServiceSpec`,
  `ServiceReference`, `APIServiceStatus`, `APIServiceCondition`,
  `APIServiceList`), the `ConditionStatus` enum, and the `kind()` and
  `resource()` helpers that qualify names with the
  `apiregistration.eonvon.github.io` group.
- `apiaggregator.helpers`: `compare_kube_aware_version_strings`, ordering of
  services (`sort_by_group_priority_minimum`, `sort_by_version_priority`,
  `sorted_by_group_and_version`), and reading and updating status conditions.
- `apiaggregator.versioned`: the wire model served as both `v1` and
  `v1beta1`, with `to_dict` / `from_dict` and defaulting
  (`set_defaults_service_reference`, `set_object_defaults`): a service
  reference without a port gets port 443.
- `apiaggregator.scheme`: a `Scheme` registry of known kinds, version
  priorities, defaulting functions and conversion to and from plain
  dictionaries. `install(scheme)` registers the internal, `v1` and `v1beta1`
  kinds and prefers `v1` over `v1beta1`.
- `apiaggregator.v1helper`: the ordering and condition helpers for versioned
  objects, and `api_service_name_to_group_version`.
- `apiaggregator.validation`: validation of internal `APIService` objects, of
  updates to them and of their status, reported as a list of `FieldError`
  values with a `FieldPath`-style field name and an `ErrorType`.
- `apiaggregator.greeting`: a small `Foo` / `FooList` resource of the
  `greeting.foen.ye/v1` group.

## Ordering services

```python
from apiaggregator.helpers import sorted_by_group_and_version

groups = sorted_by_group_and_version(services)
```

Groups with a higher `group_priority_minimum` come first; ties are ordered by
name. Within a group, a higher `version_priority` comes first; ties are
ordered by version: GA releases before beta, beta before alpha, higher
numbers first, and anything that does not look like `vN[alpha|beta]M` last,
in alphabetical order. For example:

```
v10, v2, v1, v11beta2, v10beta3, v3beta1, v12alpha1, v11alpha2, foo1, foo10
```

## Working with conditions

```python
from apiaggregator.helpers import (
    is_api_service_condition_true,
    new_local_available_api_service_condition,
    set_api_service_condition,
)

set_api_service_condition(service, new_local_available_api_service_condition())
assert is_api_service_condition_true(service, "Available")
```

Setting a condition of a type that already exists updates its reason and
message. The transition time changes only when the status changes.

## Group versions from names

```python
from apiaggregator.v1helper import api_service_name_to_group_version

api_service_name_to_group_version("v1.apiregistration.eonvon.github.io")
# GroupVersion(group='apiregistration.eonvon.github.io', version='v1')
```

A name without a dot raises `ValueError`.

## Validation

```python
from apiaggregator.validation import validate_api_service

for error in validate_api_service(service):
    print(error)
```

An empty list means the service is valid. Among other checks, the name must
equal `spec.version + "." + spec.group`, `group_priority_minimum` must be in
1..2000, `version_priority` in 1..1000, and a local service (no `service`)
may carry neither a CA bundle nor `insecure_skip_tls_verify`.

## Scheme round trips

```python
from apiaggregator.scheme import Scheme, install

scheme = Scheme()
install(scheme)
data = scheme.to_unstructured(obj)
again = scheme.from_unstructured(data)
```

`to_unstructured` adds `apiVersion` and `kind`, taken from the object's
`type_meta` when set and otherwise from the group's preferred version.

## What the package does not do

This is a library of types and helpers only. It has no command to run, no
API server, no proxying of requests to backing services and no storage of
`APIService` objects; it does not convert between the internal and the
versioned models.

## Running the tests

```
pip install -e .[test]
pytest
```