"""A registry of API kinds, their defaulting and their unstructured form."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

from apiaggregator import types as internal
from apiaggregator import versioned
from apiaggregator.meta import (
    API_VERSION_INTERNAL,
    GroupResource,
    GroupVersion,
    GroupVersionKind,
)

Defaulter = Callable[[Any], None]


def _parse_group_version(api_version: str) -> GroupVersion:
    parts = api_version.split("/")
    if len(parts) == 1:
        return GroupVersion("", parts[0])
    if len(parts) == 2:
        return GroupVersion(parts[0], parts[1])
    raise ValueError(f"unexpected GroupVersion string: {api_version}")


class Scheme:
    """Maps group/version/kind triples to classes and back, and holds defaulters."""

    def __init__(self) -> None:
        self._gvk_to_type: Dict[GroupVersionKind, type] = {}
        self._type_to_gvks: Dict[type, List[GroupVersionKind]] = {}
        self._defaulters: Dict[type, Defaulter] = {}
        self._version_priority: Dict[str, List[str]] = {}
        self._observed_versions: List[GroupVersion] = []

    def _observe(self, group_version: GroupVersion) -> None:
        if not group_version.version or group_version.version == API_VERSION_INTERNAL:
            return
        if group_version not in self._observed_versions:
            self._observed_versions.append(group_version)

    def add_known_types(self, group_version: GroupVersion, *args: type) -> None:
        """Register each class under its own name as a kind of the group version."""
        self._observe(group_version)
        for cls in args:
            gvk = group_version.with_kind(cls.__name__)
            registered = self._gvk_to_type.get(gvk)
            if registered is not None and registered is not cls:
                raise ValueError(
                    f"double registration of different types for {gvk}: "
                    f"old={registered.__module__}.{registered.__qualname__}, "
                    f"new={cls.__module__}.{cls.__qualname__}"
                )
            self._gvk_to_type[gvk] = cls
            kinds = self._type_to_gvks.setdefault(cls, [])
            if gvk not in kinds:
                kinds.append(gvk)

    def add_type_defaulting_func(self, cls: type, func: Defaulter) -> None:
        """Register the function that applies defaults to objects of a class."""
        self._defaulters[cls] = func

    def set_version_priority(self, *args: GroupVersion) -> None:
        """Set the preferred order of versions for one group."""
        groups = set()
        order = []
        for group_version in args:
            if not group_version.version or group_version.version == API_VERSION_INTERNAL:
                raise ValueError(f"internal versions cannot be prioritized: {group_version}")
            groups.add(group_version.group)
            order.append(group_version.version)
        if len(groups) != 1:
            raise ValueError(
                "must register versions for exactly one group: " + ", ".join(sorted(groups))
            )
        self._version_priority[groups.pop()] = order

    def prioritized_versions_for_group(self, group: str) -> List[GroupVersion]:
        """Return the group's versions: prioritized ones first, then others as observed."""
        result = [GroupVersion(group, v) for v in self._version_priority.get(group, [])]
        for observed in self._observed_versions:
            if observed.group == group and observed not in result:
                result.append(observed)
        return result

    def recognizes(self, gvk: GroupVersionKind) -> bool:
        """Tell whether a class is registered for the kind."""
        return gvk in self._gvk_to_type

    def object_kinds(self, obj: Any) -> List[GroupVersionKind]:
        """Return every kind the object's class is registered as."""
        kinds = self._type_to_gvks.get(type(obj))
        if not kinds:
            raise LookupError(f"no kind is registered for the type {type(obj).__qualname__}")
        return list(kinds)

    def new(self, gvk: GroupVersionKind) -> Any:
        """Return a new, empty object of the kind."""
        cls = self._gvk_to_type.get(gvk)
        if cls is None:
            raise LookupError(f"no kind {gvk.kind!r} is registered for version {gvk.group}/{gvk.version}")
        return cls()

    def default(self, obj: Any) -> None:
        """Apply the defaults registered for the object's class, if any."""
        defaulter = self._defaulters.get(type(obj))
        if defaulter is not None:
            defaulter(obj)

    def _preferred_kind(self, obj: Any) -> GroupVersionKind:
        kinds = self.object_kinds(obj)
        type_meta = getattr(obj, "type_meta", None)
        if type_meta is not None and type_meta.api_version and type_meta.kind:
            gvk = _parse_group_version(type_meta.api_version).with_kind(type_meta.kind)
            if gvk not in kinds:
                raise ValueError(f"{type(obj).__qualname__} is not registered as {gvk}")
            return gvk
        for group_version in self.prioritized_versions_for_group(kinds[0].group):
            for gvk in kinds:
                if GroupVersion(gvk.group, gvk.version) == group_version:
                    return gvk
        return kinds[0]

    def to_unstructured(self, obj: Any) -> Dict[str, Any]:
        """Return the object as a plain dictionary carrying apiVersion and kind."""
        gvk = self._preferred_kind(obj)
        to_dict = getattr(obj, "to_dict", None)
        if to_dict is None:
            raise TypeError(f"{type(obj).__qualname__} has no unstructured form")
        body = to_dict()
        body.pop("apiVersion", None)
        body.pop("kind", None)
        data: Dict[str, Any] = {
            "apiVersion": str(GroupVersion(gvk.group, gvk.version)),
            "kind": gvk.kind,
        }
        data.update(body)
        return data

    def from_unstructured(self, data: Mapping[str, Any]) -> Any:
        """Build a registered object from a plain dictionary."""
        api_version = data.get("apiVersion")
        kind = data.get("kind")
        if not api_version or not kind:
            raise ValueError("unstructured object has no apiVersion or kind")
        gvk = _parse_group_version(api_version).with_kind(kind)
        cls = self._gvk_to_type.get(gvk)
        if cls is None:
            raise LookupError(f"no kind {kind!r} is registered for version {api_version}")
        from_dict = getattr(cls, "from_dict", None)
        if from_dict is None:
            raise TypeError(f"{cls.__qualname__} has no unstructured form")
        return from_dict(data)


def v1_resource(resource: str) -> GroupResource:
    """Qualify a resource with the v1 group."""
    return versioned.V1_GROUP_VERSION.with_resource(resource).group_resource()


def v1beta1_resource(resource: str) -> GroupResource:
    """Qualify a resource with the v1beta1 group."""
    return versioned.V1BETA1_GROUP_VERSION.with_resource(resource).group_resource()


def add_internal_to_scheme(scheme: Scheme) -> None:
    """Register the internal types of the group."""
    scheme.add_known_types(
        internal.SCHEME_GROUP_VERSION, internal.APIService, internal.APIServiceList
    )


def _add_external_to_scheme(scheme: Scheme, group_version: GroupVersion) -> None:
    scheme.add_known_types(group_version, versioned.APIService, versioned.APIServiceList)
    scheme.add_type_defaulting_func(versioned.APIService, versioned.set_object_defaults)
    scheme.add_type_defaulting_func(versioned.APIServiceList, versioned.set_object_defaults)


def add_v1_to_scheme(scheme: Scheme) -> None:
    """Register the v1 types and their defaulting."""
    _add_external_to_scheme(scheme, versioned.V1_GROUP_VERSION)


def add_v1beta1_to_scheme(scheme: Scheme) -> None:
    """Register the v1beta1 types and their defaulting."""
    _add_external_to_scheme(scheme, versioned.V1BETA1_GROUP_VERSION)


def install(scheme: Scheme) -> None:
    """Register the whole API group, preferring v1 over v1beta1."""
    add_internal_to_scheme(scheme)
    add_v1_to_scheme(scheme)
    add_v1beta1_to_scheme(scheme)
    scheme.set_version_priority(versioned.V1_GROUP_VERSION, versioned.V1BETA1_GROUP_VERSION)