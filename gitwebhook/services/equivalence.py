"""
Equivalence between a desired and an actual webhook.

Both sides are first reduced to a flat mapping of canonical fields by the
provider (see HookProvider.comparable_desired / comparable_actual). This
module owns the rules applied on top of that:

- volatile fields (ids, timestamps, response/ping/test URLs, type tags) are
  dropped before comparison, see ``strip_excluded_fields``
- the shared secret is dropped on both sides, providers never echo it
- ``events`` compares as a set
- ``insecure_ssl`` compares as a bool, whatever the wire encoding
- ``branch_filter`` treats ``None`` and ``""`` as the same empty filter

Only the fields a provider lists in ``compared_fields`` take part.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from gitwebhook.core.constants import (
    HOOK_FIELD_ACTIVE,
    HOOK_FIELD_BRANCH_FILTER,
    HOOK_FIELD_CONTENT_TYPE,
    HOOK_FIELD_EVENTS,
    HOOK_FIELD_INSECURE_SSL,
    HOOK_FIELD_URL,
    SECRET_HOOK_FIELDS,
)

_TRUTHY_STRINGS = frozenset({"1", "true", "yes", "on"})


def normalize_insecure_ssl(value: Any) -> bool:
    """Canonical insecure-SSL flag.

    GitHub sends "0"/"1", older servers send 0/1, our own model uses bool.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_STRINGS
    return bool(value)


def normalize_events(events: Optional[Iterable[str]]) -> FrozenSet[str]:
    return frozenset(events or ())


def normalize_branch_filter(value: Optional[str]) -> str:
    return value or ""


def _identity(value: Any) -> Any:
    return value


FIELD_NORMALIZERS: Dict[str, Callable[[Any], Any]] = {
    HOOK_FIELD_URL: _identity,
    HOOK_FIELD_EVENTS: normalize_events,
    HOOK_FIELD_ACTIVE: bool,
    HOOK_FIELD_CONTENT_TYPE: _identity,
    HOOK_FIELD_INSECURE_SSL: normalize_insecure_ssl,
    HOOK_FIELD_BRANCH_FILTER: normalize_branch_filter,
}


def strip_excluded_fields(hook: Mapping[str, Any], volatile_fields: Iterable[str]) -> Dict[str, Any]:
    """
    Copy of ``hook`` without volatile top-level fields and without secrets.

    Secret keys are removed at every nesting level since GitHub keeps the
    secret inside the config map.
    """
    volatile = frozenset(volatile_fields)
    stripped: Dict[str, Any] = {}
    for key, value in hook.items():
        if key in volatile or key in SECRET_HOOK_FIELDS:
            continue
        if isinstance(value, Mapping):
            value = {k: v for k, v in value.items() if k not in SECRET_HOOK_FIELDS}
        stripped[key] = value
    return stripped


@dataclass(frozen=True)
class FieldDifference:
    field: str
    desired: Any
    actual: Any

    def __str__(self) -> str:
        return f"{self.field}: desired={self.desired!r} actual={self.actual!r}"


def diff_hooks(
    desired: Mapping[str, Any],
    actual: Mapping[str, Any],
    fields: Sequence[str],
) -> List[FieldDifference]:
    """Field-by-field differences between two canonical hook mappings."""
    differences: List[FieldDifference] = []
    for field in fields:
        if field not in FIELD_NORMALIZERS:
            raise KeyError(f"no comparison rule for hook field '{field}'")
        normalize = FIELD_NORMALIZERS[field]
        desired_value = normalize(desired.get(field))
        actual_value = normalize(actual.get(field))
        if desired_value != actual_value:
            differences.append(FieldDifference(field, desired_value, actual_value))
    return differences


def hooks_equivalent(
    desired: Mapping[str, Any],
    actual: Mapping[str, Any],
    fields: Sequence[str],
) -> bool:
    return not diff_hooks(desired, actual, fields)
