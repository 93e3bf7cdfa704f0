"""Validation of APIService objects and the field-error model it reports with."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from apiaggregator.meta import ObjectMeta
from apiaggregator.types import APIService, APIServiceStatus, ConditionStatus

NameValidator = Callable[[str, bool], List[str]]

DNS1123_SUBDOMAIN_MAX_LENGTH = 253
DNS1035_LABEL_MAX_LENGTH = 63
QUALIFIED_NAME_MAX_LENGTH = 63
LABEL_VALUE_MAX_LENGTH = 63
TOTAL_ANNOTATION_SIZE_LIMIT = 256 * 1024

_DNS1123_LABEL_FMT = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN_FMT = _DNS1123_LABEL_FMT + r"(\." + _DNS1123_LABEL_FMT + r")*"
_DNS1123_SUBDOMAIN_MSG = (
    "a lowercase RFC 1123 subdomain must consist of lower case alphanumeric characters, "
    "'-' or '.', and must start and end with an alphanumeric character"
)
_DNS1035_LABEL_FMT = r"[a-z]([-a-z0-9]*[a-z0-9])?"
_DNS1035_LABEL_MSG = (
    "a DNS-1035 label must consist of lower case alphanumeric characters or '-', "
    "start with an alphabetic character, and end with an alphanumeric character"
)
_QNAME_CHAR_FMT = "[A-Za-z0-9]"
_QNAME_EXT_CHAR_FMT = "[-A-Za-z0-9_.]"
_QUALIFIED_NAME_FMT = "(" + _QNAME_CHAR_FMT + _QNAME_EXT_CHAR_FMT + "*)?" + _QNAME_CHAR_FMT
_QUALIFIED_NAME_MSG = (
    "must consist of alphanumeric characters, '-', '_' or '.', "
    "and must start and end with an alphanumeric character"
)
_LABEL_VALUE_FMT = "(" + _QUALIFIED_NAME_FMT + ")?"
_LABEL_VALUE_MSG = (
    "a valid label must be an empty string or consist of alphanumeric characters, "
    "'-', '_' or '.', and must start and end with an alphanumeric character"
)

_DNS1123_SUBDOMAIN_RE = re.compile(_DNS1123_SUBDOMAIN_FMT)
_DNS1035_LABEL_RE = re.compile(_DNS1035_LABEL_FMT)
_QUALIFIED_NAME_RE = re.compile(_QUALIFIED_NAME_FMT)
_LABEL_VALUE_RE = re.compile(_LABEL_VALUE_FMT)

_NAME_MAY_NOT_BE = (".", "..")
_NAME_MAY_NOT_CONTAIN = ("/", "%")


class ErrorType(Enum):
    """The kind of problem a field error reports."""

    NOT_FOUND = "FieldValueNotFound"
    REQUIRED = "FieldValueRequired"
    DUPLICATE = "FieldValueDuplicate"
    INVALID = "FieldValueInvalid"
    NOT_SUPPORTED = "FieldValueNotSupported"
    FORBIDDEN = "FieldValueForbidden"
    TOO_LONG = "FieldValueTooLong"
    TOO_MANY = "FieldValueTooMany"
    INTERNAL = "InternalError"

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS: Dict[ErrorType, str] = {
    ErrorType.NOT_FOUND: "Not found",
    ErrorType.REQUIRED: "Required value",
    ErrorType.DUPLICATE: "Duplicate value",
    ErrorType.INVALID: "Invalid value",
    ErrorType.NOT_SUPPORTED: "Unsupported value",
    ErrorType.FORBIDDEN: "Forbidden",
    ErrorType.TOO_LONG: "Too long",
    ErrorType.TOO_MANY: "Too many",
    ErrorType.INTERNAL: "Internal error",
}

_VALUELESS_TYPES = frozenset(
    {ErrorType.REQUIRED, ErrorType.FORBIDDEN, ErrorType.TOO_LONG, ErrorType.INTERNAL}
)


class FieldPath:
    """A path to a field inside an object, such as ``status.conditions[0].status``."""

    __slots__ = ("_elements",)

    def __init__(self, name: str, *more_names: str) -> None:
        self._elements: Tuple[Tuple[Optional[str], Optional[int]], ...] = tuple(
            (segment, None) for segment in (name, *more_names)
        )

    @classmethod
    def _of(cls, elements: Tuple[Tuple[Optional[str], Optional[int]], ...]) -> "FieldPath":
        path = cls.__new__(cls)
        path._elements = elements
        return path

    def child(self, name: str, *args: str) -> "FieldPath":
        """Return the path of a named field below this one."""
        return self._of(self._elements + tuple((segment, None) for segment in (name, *args)))

    def index(self, index: int) -> "FieldPath":
        """Return the path of an element of the list at this path."""
        return self._of(self._elements + ((None, index),))

    def __str__(self) -> str:
        parts: List[str] = []
        for name, position in self._elements:
            if position is not None:
                parts.append(f"[{position}]")
            else:
                if parts:
                    parts.append(".")
                parts.append(name or "")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldPath):
            return NotImplemented
        return self._elements == other._elements

    def __hash__(self) -> int:
        return hash(self._elements)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _quote(value)
    return str(value)


@dataclass(frozen=True)
class FieldError:
    """One validation problem found at a field."""

    type: ErrorType
    field: str
    bad_value: Any = None
    detail: str = ""

    @property
    def error_body(self) -> str:
        if self.type in _VALUELESS_TYPES:
            body = self.type.description
        else:
            body = f"{self.type.description}: {_format_value(self.bad_value)}"
        if self.detail:
            body += f": {self.detail}"
        return body

    def __str__(self) -> str:
        return f"{self.field}: {self.error_body}"


def _required(path: FieldPath, detail: str) -> FieldError:
    return FieldError(ErrorType.REQUIRED, str(path), "", detail)


def _invalid(path: FieldPath, value: Any, detail: str) -> FieldError:
    return FieldError(ErrorType.INVALID, str(path), value, detail)


def _forbidden(path: FieldPath, detail: str) -> FieldError:
    return FieldError(ErrorType.FORBIDDEN, str(path), "", detail)


def _too_long(path: FieldPath, value: Any, limit: int) -> FieldError:
    return FieldError(ErrorType.TOO_LONG, str(path), value, f"must have at most {limit} bytes")


def _not_supported(path: FieldPath, value: Any, valid_values: Sequence[str]) -> FieldError:
    detail = ""
    if valid_values:
        detail = "supported values: " + ", ".join(_quote(v) for v in valid_values)
    return FieldError(ErrorType.NOT_SUPPORTED, str(path), value, detail)


def _max_len_error(length: int) -> str:
    return f"must be no more than {length} characters"


def _regex_error(message: str, fmt: str, *examples: str) -> str:
    text = message + " ("
    if examples:
        text += "e.g. " + " or ".join(f"'{example}'" for example in examples) + ", "
    return text + "regex used for validation is '" + fmt + "')"


def is_dns1123_subdomain(value: str) -> List[str]:
    """Return the reasons the value is not a lowercase RFC 1123 subdomain."""
    errors: List[str] = []
    if len(value) > DNS1123_SUBDOMAIN_MAX_LENGTH:
        errors.append(_max_len_error(DNS1123_SUBDOMAIN_MAX_LENGTH))
    if not _DNS1123_SUBDOMAIN_RE.fullmatch(value):
        errors.append(_regex_error(_DNS1123_SUBDOMAIN_MSG, _DNS1123_SUBDOMAIN_FMT, "example.com"))
    return errors


def is_dns1035_label(value: str) -> List[str]:
    """Return the reasons the value is not an RFC 1035 label."""
    errors: List[str] = []
    if len(value) > DNS1035_LABEL_MAX_LENGTH:
        errors.append(_max_len_error(DNS1035_LABEL_MAX_LENGTH))
    if not _DNS1035_LABEL_RE.fullmatch(value):
        errors.append(_regex_error(_DNS1035_LABEL_MSG, _DNS1035_LABEL_FMT, "my-name", "abc-123"))
    return errors


def is_valid_port_num(port: int) -> List[str]:
    """Return the reasons the number is not a valid port (1 to 65535)."""
    if 1 <= port <= 65535:
        return []
    return ["must be between 1 and 65535, inclusive"]


def is_valid_path_segment_name(name: str) -> List[str]:
    """Return the reasons the name cannot be used as one segment of a URL path."""
    errors = [f"may not be '{illegal}'" for illegal in _NAME_MAY_NOT_BE if name == illegal]
    errors.extend(
        f"may not contain '{illegal}'" for illegal in _NAME_MAY_NOT_CONTAIN if illegal in name
    )
    return errors


def _is_qualified_name(value: str) -> List[str]:
    parts = value.split("/")
    if len(parts) == 1:
        name = parts[0]
        errors: List[str] = []
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            errors = ["prefix part must be non-empty"]
        else:
            errors = ["prefix part " + msg for msg in is_dns1123_subdomain(prefix)]
    else:
        return [
            "a qualified name "
            + _regex_error(_QUALIFIED_NAME_MSG, _QUALIFIED_NAME_FMT, "MyName", "my.name", "123-abc")
        ]
    if not name:
        errors.append("name part must be non-empty")
    elif len(name) > QUALIFIED_NAME_MAX_LENGTH:
        errors.append("name part " + _max_len_error(QUALIFIED_NAME_MAX_LENGTH))
    if not _QUALIFIED_NAME_RE.fullmatch(name):
        errors.append(
            "name part "
            + _regex_error(_QUALIFIED_NAME_MSG, _QUALIFIED_NAME_FMT, "MyName", "my.name", "123-abc")
        )
    return errors


def _is_valid_label_value(value: str) -> List[str]:
    errors: List[str] = []
    if len(value) > LABEL_VALUE_MAX_LENGTH:
        errors.append(_max_len_error(LABEL_VALUE_MAX_LENGTH))
    if not _LABEL_VALUE_RE.fullmatch(value):
        errors.append(_regex_error(_LABEL_VALUE_MSG, _LABEL_VALUE_FMT, "MyValue", "my_value", "12345"))
    return errors


def _validate_labels(labels: Dict[str, str], path: FieldPath) -> List[FieldError]:
    errors: List[FieldError] = []
    for key, value in labels.items():
        errors.extend(_invalid(path, key, msg) for msg in _is_qualified_name(key))
        errors.extend(_invalid(path, value, msg) for msg in _is_valid_label_value(value))
    return errors


def _validate_annotations(annotations: Dict[str, str], path: FieldPath) -> List[FieldError]:
    errors: List[FieldError] = []
    for key in annotations:
        errors.extend(_invalid(path, key, msg) for msg in _is_qualified_name(key.lower()))
    total = sum(len(key) + len(value) for key, value in annotations.items())
    if total > TOTAL_ANNOTATION_SIZE_LIMIT:
        errors.append(_too_long(path, "", TOTAL_ANNOTATION_SIZE_LIMIT))
    return errors


def _validate_immutable(new: Any, old: Any, path: FieldPath) -> Iterable[FieldError]:
    if new != old:
        yield _invalid(path, new, "field is immutable")


def validate_object_meta(
    meta: ObjectMeta, name_fn: NameValidator, path: FieldPath
) -> List[FieldError]:
    """Validate the metadata of a cluster-scoped object, checking names with name_fn."""
    errors: List[FieldError] = []
    if meta.generate_name:
        errors.extend(
            _invalid(path.child("generateName"), meta.generate_name, msg)
            for msg in name_fn(meta.generate_name, True)
        )
    if not meta.name:
        if not meta.generate_name:
            errors.append(_required(path.child("name"), "name or generateName is required"))
    else:
        errors.extend(
            _invalid(path.child("name"), meta.name, msg) for msg in name_fn(meta.name, False)
        )
    if meta.namespace:
        errors.append(_forbidden(path.child("namespace"), "not allowed on this type"))
    if meta.generation < 0:
        errors.append(
            _invalid(path.child("generation"), meta.generation, "must be greater than or equal to 0")
        )
    errors.extend(_validate_labels(meta.labels, path.child("labels")))
    errors.extend(_validate_annotations(meta.annotations, path.child("annotations")))
    return errors


def validate_object_meta_update(
    new_meta: ObjectMeta, old_meta: ObjectMeta, path: FieldPath
) -> List[FieldError]:
    """Validate that an update keeps the metadata's immutable fields unchanged."""
    errors: List[FieldError] = []
    if not new_meta.resource_version:
        errors.append(
            _invalid(
                path.child("resourceVersion"),
                new_meta.resource_version,
                "must be specified for an update",
            )
        )
    if new_meta.generation < old_meta.generation:
        errors.append(
            _invalid(path.child("generation"), new_meta.generation, "must not be decremented")
        )
    errors.extend(_validate_immutable(new_meta.name, old_meta.name, path.child("name")))
    errors.extend(
        _validate_immutable(new_meta.namespace, old_meta.namespace, path.child("namespace"))
    )
    errors.extend(_validate_immutable(new_meta.uid, old_meta.uid, path.child("uid")))
    errors.extend(
        _validate_immutable(
            new_meta.creation_timestamp,
            old_meta.creation_timestamp,
            path.child("creationTimestamp"),
        )
    )
    errors.extend(_validate_labels(new_meta.labels, path.child("labels")))
    errors.extend(_validate_annotations(new_meta.annotations, path.child("annotations")))
    return errors


def validate_api_service(api_service: APIService) -> List[FieldError]:
    """Validate that the APIService is correctly defined."""
    spec = api_service.spec
    required_name = ".".join([spec.version, spec.group])

    def name_fn(name: str, prefix: bool) -> List[str]:
        failures = is_valid_path_segment_name(name)
        if failures:
            return failures
        if name != required_name:
            return [f'must be `spec.version +"."+spec.group`: {_quote(required_name)}']
        return []

    errors = validate_object_meta(api_service.metadata, name_fn, FieldPath("metadata"))

    if not spec.group and spec.version != "v1":
        errors.append(
            _required(
                FieldPath("spec", "group"),
                "only v1 may have an empty group and it better be legacy kube",
            )
        )
    if spec.group:
        errors.extend(
            _invalid(FieldPath("spec", "group"), spec.group, msg)
            for msg in is_dns1123_subdomain(spec.group)
        )
    errors.extend(
        _invalid(FieldPath("spec", "version"), spec.version, msg)
        for msg in is_dns1035_label(spec.version)
    )

    if spec.group_priority_minimum <= 0 or spec.group_priority_minimum > 2000:
        errors.append(
            _invalid(
                FieldPath("spec", "groupPriorityMinimum"),
                spec.group_priority_minimum,
                "must be positive and less than 2000",
            )
        )
    if spec.version_priority <= 0 or spec.version_priority > 1000:
        errors.append(
            _invalid(
                FieldPath("spec", "versionPriority"),
                spec.version_priority,
                "must be positive and less than 1000",
            )
        )

    if spec.service is None:
        if spec.ca_bundle:
            errors.append(
                _invalid(
                    FieldPath("spec", "caBundle"),
                    f"{len(spec.ca_bundle)} bytes",
                    "local APIServices may not hava a caBundle",
                )
            )
        if spec.insecure_skip_tls_verify:
            errors.append(
                _invalid(
                    FieldPath("spec", "insecureSkipTLSVerify"),
                    spec.insecure_skip_tls_verify,
                    "local APIServices may not hava insecureSkipTLSVerify",
                )
            )
        return errors

    service = spec.service
    if not service.namespace:
        errors.append(_required(FieldPath("spec", "service", "namespace"), ""))
    if not service.name:
        errors.append(_required(FieldPath("spec", "service", "name"), ""))
    port_errors = is_valid_port_num(service.port)
    if port_errors:
        errors.append(
            _invalid(
                FieldPath("spec", "service", "port"),
                service.port,
                "port is not valid" + ", ".join(port_errors),
            )
        )
    if spec.insecure_skip_tls_verify and spec.ca_bundle:
        errors.append(
            _invalid(
                FieldPath("spec", "insecureSkipTLSVerify"),
                service.port,
                "may not be true if caBundle is present",
            )
        )
    return errors


def validate_api_service_update(
    new_api_service: APIService, old_api_service: APIService
) -> List[FieldError]:
    """Validate an update of an APIService."""
    errors = validate_object_meta_update(
        new_api_service.metadata, old_api_service.metadata, FieldPath("metadata")
    )
    errors.extend(validate_api_service(new_api_service))
    return errors


_SUPPORTED_STATUSES = tuple(ConditionStatus)


def validate_api_service_status(status: APIServiceStatus, path: FieldPath) -> List[FieldError]:
    """Validate that every condition's status is one of True, False or Unknown."""
    errors: List[FieldError] = []
    for position, condition in enumerate(status.conditions):
        if condition.status not in _SUPPORTED_STATUSES:
            errors.append(
                _not_supported(
                    path.child("conditions").index(position).child("status"),
                    condition.status,
                    [s.value for s in _SUPPORTED_STATUSES],
                )
            )
    return errors


def validate_api_service_status_update(
    new_api_service: APIService, old_api_service: APIService
) -> List[FieldError]:
    """Validate an update of an APIService's status."""
    errors = validate_object_meta_update(
        new_api_service.metadata, old_api_service.metadata, FieldPath("metadata")
    )
    errors.extend(validate_api_service_status(new_api_service.status, FieldPath("status")))
    return errors