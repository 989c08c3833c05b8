"""
Tag Reconciliation Module
=========================

Computes the minimal plan that converges a resource's remote tags to the
tags declared in configuration.

Most AWS tagging APIs have no "update value" call: a tag whose value
changed has to be removed and then added again. The plan therefore lists
changed keys in both ``to_remove`` (with the old value) and ``to_add``
(with the new value), and callers must apply removals first.

Functions
---------
diff
    Compute a TagDelta between desired and current tags.
strip_reserved
    Drop AWS-managed ``aws:`` tags from a tag set.
to_aws_tags
    Convert a mapping to the ``[{"Key": ..., "Value": ...}]`` shape.

Example
-------
>>> from aws_converge.core.tags import diff
>>>
>>> delta = diff({"Name": "a", "Env": "prod"}, {"Name": "a", "Env": "dev", "Old": "x"})
>>> delta.to_remove
{'Env': 'dev', 'Old': 'x'}
>>> delta.to_add
{'Env': 'prod'}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set

from aws_converge.core.exceptions import InvalidTagError

# Tags under this prefix are managed by AWS and cannot be changed
RESERVED_PREFIX = "aws:"


@dataclass(frozen=True)
class TagDelta:
    """
    Plan of tag operations that turns ``current`` into ``desired``.

    Parameters
    ----------
    to_remove : dict
        Keys to remove, mapped to the value currently applied.
    to_add : dict
        Keys to add, mapped to the desired value.

    Both mappings are copied into read-only views, so a plan cannot change
    after it was computed.

    Examples
    --------
    >>> delta = TagDelta(to_remove={"Env": "dev"}, to_add={"Env": "prod"})
    >>> delta.changed_keys
    {'Env'}
    >>> delta.apply({"Env": "dev", "Name": "a"})
    {'Name': 'a', 'Env': 'prod'}
    """

    to_remove: Mapping[str, str] = field(default_factory=dict)
    to_add: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "to_remove", MappingProxyType(dict(self.to_remove)))
        object.__setattr__(self, "to_add", MappingProxyType(dict(self.to_add)))

    @property
    def is_empty(self) -> bool:
        """True when no remote call is needed."""
        return not self.to_remove and not self.to_add

    @property
    def changed_keys(self) -> Set[str]:
        """Keys whose value changes (present in both lists)."""
        return set(self.to_remove) & set(self.to_add)

    @property
    def removed_keys(self) -> Set[str]:
        """Keys that are dropped entirely."""
        return set(self.to_remove) - set(self.to_add)

    @property
    def added_keys(self) -> Set[str]:
        """Keys that are new."""
        return set(self.to_add) - set(self.to_remove)

    def apply(self, current: Mapping[str, str]) -> Dict[str, str]:
        """
        Apply the plan to a tag set, removals first.

        Parameters
        ----------
        current : mapping
            The tag set the plan was computed against.

        Returns
        -------
        dict
            The resulting tag set.
        """
        result = {k: v for k, v in current.items() if k not in self.to_remove}
        result.update(self.to_add)
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "to_remove": dict(sorted(self.to_remove.items())),
            "to_add": dict(sorted(self.to_add.items())),
            "changed_keys": sorted(self.changed_keys),
        }

    def __repr__(self) -> str:
        return (
            f"TagDelta(remove={sorted(self.to_remove)}, "
            f"add={sorted(self.to_add)})"
        )


def validate_tags(tags: Mapping[str, str], label: str = "tags") -> None:
    """
    Ensure every key and value in a tag set is a string.

    Raises
    ------
    InvalidTagError
        If a key or value is None or not a string.
    """
    for key, value in tags.items():
        if not isinstance(key, str):
            raise InvalidTagError(
                f"Tag keys in {label} must be strings",
                details={"key": repr(key)},
            )
        if not isinstance(value, str):
            raise InvalidTagError(
                f"Tag '{key}' in {label} has a non-string value",
                details={"key": key, "value": repr(value)},
            )


def diff(desired: Mapping[str, str], current: Mapping[str, str]) -> TagDelta:
    """
    Compute the minimal remove/add plan from ``current`` to ``desired``.

    Parameters
    ----------
    desired : mapping
        Tags declared in configuration.
    current : mapping
        Tags last known to be applied remotely.

    Returns
    -------
    TagDelta
        Keys only in ``current`` are removed, keys only in ``desired`` are
        added, keys with a different value are both removed and re-added.
        Keys with an identical value appear in neither list.

    Raises
    ------
    InvalidTagError
        If either tag set has a null key or value.

    Example
    -------
    >>> diff({"Team": "core"}, {"Team": "core"}).is_empty
    True
    """
    validate_tags(desired, "desired")
    validate_tags(current, "current")

    to_remove = {}
    to_add = {}

    for key, value in current.items():
        if key not in desired:
            to_remove[key] = value
        elif desired[key] != value:
            to_remove[key] = value
            to_add[key] = desired[key]

    for key, value in desired.items():
        if key not in current:
            to_add[key] = value

    return TagDelta(to_remove=to_remove, to_add=to_add)


def strip_reserved(tags: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Return a copy of ``tags`` without AWS-managed ``aws:`` keys."""
    if not tags:
        return {}
    return {k: v for k, v in tags.items() if not k.startswith(RESERVED_PREFIX)}


def to_aws_tags(tags: Mapping[str, str]) -> List[Dict[str, str]]:
    """Convert ``{"k": "v"}`` to ``[{"Key": "k", "Value": "v"}]``, sorted by key."""
    return [{"Key": k, "Value": v} for k, v in sorted(tags.items())]


def from_aws_tags(tags: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    """Convert ``[{"Key": "k", "Value": "v"}]`` back to a mapping."""
    return {t["Key"]: t.get("Value", "") for t in tags or []}


class TagReconciler:
    """
    Object form of :func:`diff` for callers that inject a reconciler.

    Holds no state, so one instance can be shared across threads.
    """

    @staticmethod
    def diff(desired: Mapping[str, str], current: Mapping[str, str]) -> TagDelta:
        """See :func:`diff`."""
        return diff(desired, current)
