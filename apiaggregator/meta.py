"""Object metadata and group/version/kind identifiers shared by API types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

API_VERSION_INTERNAL = "__internal"

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def now() -> datetime:
    """Return the current UTC time at the one-second precision used on the wire."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(_TIME_FORMAT)


def _parse_time(text: Optional[str]) -> Optional[datetime]:
    if not text:
        return None
    return datetime.strptime(text, _TIME_FORMAT).replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class GroupKind:
    """A kind qualified by its API group."""

    group: str
    kind: str

    def __str__(self) -> str:
        return self.kind if not self.group else f"{self.kind}.{self.group}"


@dataclass(frozen=True)
class GroupResource:
    """A resource qualified by its API group."""

    group: str
    resource: str

    def __str__(self) -> str:
        return self.resource if not self.group else f"{self.resource}.{self.group}"


@dataclass(frozen=True)
class GroupVersionKind:
    """A kind qualified by its API group and version."""

    group: str
    version: str
    kind: str

    def group_kind(self) -> GroupKind:
        return GroupKind(self.group, self.kind)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersionResource:
    """A resource qualified by its API group and version."""

    group: str
    version: str
    resource: str

    def group_resource(self) -> GroupResource:
        return GroupResource(self.group, self.resource)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Resource={self.resource}"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)

    def with_resource(self, resource: str) -> GroupVersionResource:
        return GroupVersionResource(self.group, self.version, resource)

    def __str__(self) -> str:
        return self.version if not self.group else f"{self.group}/{self.version}"


@dataclass
class TypeMeta:
    """The apiVersion and kind carried inline by every serialized object."""

    api_version: str = ""
    kind: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.api_version:
            data["apiVersion"] = self.api_version
        if self.kind:
            data["kind"] = self.kind
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TypeMeta":
        return cls(api_version=data.get("apiVersion", ""), kind=data.get("kind", ""))


@dataclass
class ObjectMeta:
    """Metadata every persisted object carries."""

    name: str = ""
    generate_name: str = ""
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    generation: int = 0
    creation_timestamp: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        entries = {
            "name": self.name,
            "generateName": self.generate_name,
            "namespace": self.namespace,
            "uid": self.uid,
            "resourceVersion": self.resource_version,
            "generation": self.generation,
            "creationTimestamp": (
                _format_time(self.creation_timestamp) if self.creation_timestamp else None
            ),
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
        }
        return {key: value for key, value in entries.items() if value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectMeta":
        return cls(
            name=data.get("name", ""),
            generate_name=data.get("generateName", ""),
            namespace=data.get("namespace", ""),
            uid=data.get("uid", ""),
            resource_version=data.get("resourceVersion", ""),
            generation=int(data.get("generation", 0)),
            creation_timestamp=_parse_time(data.get("creationTimestamp")),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )


@dataclass
class ListMeta:
    """Metadata carried by list objects."""

    resource_version: str = ""
    continue_: str = ""
    remaining_item_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.resource_version:
            data["resourceVersion"] = self.resource_version
        if self.continue_:
            data["continue"] = self.continue_
        if self.remaining_item_count is not None:
            data["remainingItemCount"] = self.remaining_item_count
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ListMeta":
        remaining = data.get("remainingItemCount")
        return cls(
            resource_version=data.get("resourceVersion", ""),
            continue_=data.get("continue", ""),
            remaining_item_count=None if remaining is None else int(remaining),
        )