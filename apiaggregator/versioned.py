"""External (v1 and v1beta1) types of the apiregistration API group.

Both served versions share one schema. An APIService holds the information
needed to aggregate another API server: requests for the spec's group and
version go to the referenced service, on port 443 unless stated otherwise.
The CA bundle verifies that server, or verification is skipped when
insecure_skip_tls_verify is set. The status carries a set of conditions;
"Available" being true means requests are forwarded to that server.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from apiaggregator.meta import (
    GroupVersion,
    ListMeta,
    ObjectMeta,
    TypeMeta,
    _format_time,
    _parse_time,
)
from apiaggregator.types import AVAILABLE, GROUP_NAME, ConditionStatus

V1_GROUP_VERSION = GroupVersion(GROUP_NAME, "v1")
V1BETA1_GROUP_VERSION = GroupVersion(GROUP_NAME, "v1beta1")

DEFAULT_SERVICE_PORT = 443

__all__ = [
    "AVAILABLE",
    "DEFAULT_SERVICE_PORT",
    "V1_GROUP_VERSION",
    "V1BETA1_GROUP_VERSION",
    "ServiceReference",
    "APIServiceSpec",
    "APIServiceCondition",
    "APIServiceStatus",
    "APIService",
    "APIServiceList",
    "set_defaults_service_reference",
    "set_object_defaults",
]


def _status_from_wire(value: str) -> Union[ConditionStatus, str]:
    try:
        return ConditionStatus(value)
    except ValueError:
        return value


def _status_to_wire(value: Union[ConditionStatus, str]) -> str:
    return value.value if isinstance(value, ConditionStatus) else value


@dataclass
class ServiceReference:
    """Reference to the service that backs an API server."""

    namespace: str = ""
    name: str = ""
    port: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.namespace:
            data["namespace"] = self.namespace
        if self.name:
            data["name"] = self.name
        if self.port is not None:
            data["port"] = self.port
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceReference":
        port = data.get("port")
        return cls(
            namespace=data.get("namespace", ""),
            name=data.get("name", ""),
            port=None if port is None else int(port),
        )


@dataclass
class APIServiceSpec:
    """How to locate and talk to the server for one group version."""

    service: Optional[ServiceReference] = None
    group: str = ""
    version: str = ""
    insecure_skip_tls_verify: bool = False
    ca_bundle: bytes = b""
    group_priority_minimum: int = 0
    version_priority: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.service is not None:
            data["service"] = self.service.to_dict()
        if self.group:
            data["group"] = self.group
        if self.version:
            data["version"] = self.version
        if self.insecure_skip_tls_verify:
            data["insecureSkipTLSVerify"] = True
        if self.ca_bundle:
            data["caBundle"] = base64.b64encode(self.ca_bundle).decode("ascii")
        data["groupPriorityMinimum"] = self.group_priority_minimum
        data["versionPriority"] = self.version_priority
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIServiceSpec":
        service = data.get("service")
        bundle = data.get("caBundle")
        return cls(
            service=None if service is None else ServiceReference.from_dict(service),
            group=data.get("group", ""),
            version=data.get("version", ""),
            insecure_skip_tls_verify=bool(data.get("insecureSkipTLSVerify", False)),
            ca_bundle=base64.b64decode(bundle) if bundle else b"",
            group_priority_minimum=int(data.get("groupPriorityMinimum", 0)),
            version_priority=int(data.get("versionPriority", 0)),
        )


@dataclass
class APIServiceCondition:
    """The state of an APIService at a particular point."""

    type: str = ""
    status: Union[ConditionStatus, str] = ConditionStatus.UNKNOWN
    last_transition_time: Optional[datetime] = None
    reason: str = ""
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "status": _status_to_wire(self.status),
        }
        if self.last_transition_time is not None:
            data["lastTransitionTime"] = _format_time(self.last_transition_time)
        if self.reason:
            data["reason"] = self.reason
        if self.message:
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIServiceCondition":
        return cls(
            type=data.get("type", ""),
            status=_status_from_wire(data.get("status", "")),
            last_transition_time=_parse_time(data.get("lastTransitionTime")),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
        )


@dataclass
class APIServiceStatus:
    """Derived information about an API server."""

    conditions: List[APIServiceCondition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        if not self.conditions:
            return {}
        return {"conditions": [condition.to_dict() for condition in self.conditions]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIServiceStatus":
        return cls(
            conditions=[
                APIServiceCondition.from_dict(item) for item in data.get("conditions") or []
            ]
        )


@dataclass
class APIService:
    """A server for a particular group version; its name must be "version.group"."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: APIServiceSpec = field(default_factory=APIServiceSpec)
    status: APIServiceStatus = field(default_factory=APIServiceStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> Dict[str, Any]:
        data = self.type_meta.to_dict()
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        data["status"] = self.status.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIService":
        return cls(
            type_meta=TypeMeta.from_dict(data),
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=APIServiceSpec.from_dict(data.get("spec") or {}),
            status=APIServiceStatus.from_dict(data.get("status") or {}),
        )


@dataclass
class APIServiceList:
    """A list of APIService objects."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    list_meta: ListMeta = field(default_factory=ListMeta)
    items: List[APIService] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.type_meta.to_dict()
        data["metadata"] = self.list_meta.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIServiceList":
        return cls(
            type_meta=TypeMeta.from_dict(data),
            list_meta=ListMeta.from_dict(data.get("metadata") or {}),
            items=[APIService.from_dict(item) for item in data.get("items") or []],
        )


def set_defaults_service_reference(obj: ServiceReference) -> None:
    """Give a service reference without a port the default port 443."""
    if obj.port is None:
        obj.port = DEFAULT_SERVICE_PORT


def set_object_defaults(obj: Union[APIService, APIServiceList]) -> None:
    """Apply defaults to an APIService or to every item of an APIServiceList."""
    if isinstance(obj, APIServiceList):
        for item in obj.items:
            set_object_defaults(item)
        return
    if isinstance(obj, APIService):
        if obj.spec.service is not None:
            set_defaults_service_reference(obj.spec.service)
        return
    raise TypeError(f"no defaults registered for {type(obj).__name__}")