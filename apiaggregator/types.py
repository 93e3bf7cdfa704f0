"""Internal (unversioned) types of the apiregistration API group."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from apiaggregator.meta import (
    API_VERSION_INTERNAL,
    GroupKind,
    GroupResource,
    GroupVersion,
    ListMeta,
    ObjectMeta,
    TypeMeta,
)

GROUP_NAME = "apiregistration.eonvon.github.io"
SCHEME_GROUP_VERSION = GroupVersion(GROUP_NAME, API_VERSION_INTERNAL)

# Condition type meaning the service exists and is reachable.
AVAILABLE = "Available"


class ConditionStatus(str, Enum):
    """Whether a resource is in a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


def kind(kind: str) -> GroupKind:
    """Qualify an unqualified kind with this API group."""
    return SCHEME_GROUP_VERSION.with_kind(kind).group_kind()


def resource(resource: str) -> GroupResource:
    """Qualify an unqualified resource with this API group."""
    return SCHEME_GROUP_VERSION.with_resource(resource).group_resource()


@dataclass
class ServiceReference:
    """Reference to the service that backs an API server."""

    namespace: str = ""
    name: str = ""
    port: int = 0


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


@dataclass
class APIServiceCondition:
    """One observed condition of an APIService."""

    type: str = ""
    status: ConditionStatus = ConditionStatus.UNKNOWN
    last_transition_time: Optional[datetime] = None
    reason: str = ""
    message: str = ""


@dataclass
class APIServiceStatus:
    """Derived information about an API server."""

    conditions: List[APIServiceCondition] = field(default_factory=list)


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


@dataclass
class APIServiceList:
    """A list of APIService objects."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    list_meta: ListMeta = field(default_factory=ListMeta)
    items: List[APIService] = field(default_factory=list)