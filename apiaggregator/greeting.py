"""Types of the greeting.foen.ye/v1 API group: the Foo resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from apiaggregator.meta import GroupVersion, ListMeta, ObjectMeta, TypeMeta

GROUP_NAME = "greeting.foen.ye"
SCHEME_GROUP_VERSION = GroupVersion(GROUP_NAME, "v1")


@dataclass
class FooSpec:
    """The desired state of a Foo: a greeting and a free-form description."""

    message: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FooSpec":
        return cls(message=data.get("message", ""), description=data.get("description", ""))


@dataclass
class Foo:
    """A greeting resource."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: FooSpec = field(default_factory=FooSpec)

    def to_dict(self) -> Dict[str, Any]:
        data = self.type_meta.to_dict()
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Foo":
        return cls(
            type_meta=TypeMeta.from_dict(data),
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=FooSpec.from_dict(data.get("spec") or {}),
        )


@dataclass
class FooList:
    """A list of Foo objects."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    list_meta: ListMeta = field(default_factory=ListMeta)
    items: List[Foo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.type_meta.to_dict()
        data["metadata"] = self.list_meta.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FooList":
        return cls(
            type_meta=TypeMeta.from_dict(data),
            list_meta=ListMeta.from_dict(data.get("metadata") or {}),
            items=[Foo.from_dict(item) for item in data.get("items") or []],
        )