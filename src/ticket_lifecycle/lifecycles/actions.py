"""Action normalization and resolution.

Actions may be configured in three shapes:

* a mapping ``{"from -> to": {"label": ..., "update": ...}}``, expanded in
  sorted key order;
* an expanded list ``[{"from": ..., "to": ..., "label": ..., "update": ...}]``;
* a compact list ``["from -> to", {...}, "from -> to", {...}]`` that keeps
  the author's ordering.

All three normalize to a tuple of :class:`ActionEntry`; nothing past the
builder sees the raw shapes.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .models import ActionEntry, UpdateKind
from .transitions import split_transition_key

_UPDATE_KINDS = {kind.value for kind in UpdateKind}


def _entry(from_status: str, to_status: str, info: Any) -> tuple[ActionEntry | None, str | None]:
    if not isinstance(info, Mapping):
        return None, f"action {from_status} -> {to_status} must be a mapping"
    label = info.get("label")
    if label is None:
        label = ""
    if not isinstance(label, str):
        return None, f"action {from_status} -> {to_status} has a non-string label"
    update = info.get("update")
    if update is None:
        update = ""
    if not isinstance(update, str) or update not in _UPDATE_KINDS:
        return None, f"action {from_status} -> {to_status} has unknown update {update!r}"
    return ActionEntry(from_status=from_status, to_status=to_status, label=label, update=update), None


def _from_pair(key: Any, info: Any) -> tuple[ActionEntry | None, str | None]:
    pair = split_transition_key(key)
    if pair is None:
        return None, f"malformed action transition {key!r}"
    return _entry(pair[0], pair[1], info)


def _from_expanded(item: Mapping[str, Any]) -> tuple[ActionEntry | None, str | None]:
    from_status = item.get("from")
    to_status = item.get("to")
    if not isinstance(from_status, str) or not from_status:
        return None, f"action {item!r} is missing 'from'"
    if not isinstance(to_status, str) or not to_status:
        return None, f"action {item!r} is missing 'to'"
    return _entry(from_status, to_status, item)


def normalize_actions(raw: Any) -> tuple[tuple[ActionEntry, ...], list[str]]:
    """Normalize any supported action shape.

    Returns the entries that parsed and a list of problems for the ones
    that did not. ``None`` normalizes to no actions.
    """
    entries: list[ActionEntry] = []
    problems: list[str] = []

    def _collect(result: tuple[ActionEntry | None, str | None]) -> None:
        entry, problem = result
        if entry is not None:
            entries.append(entry)
        if problem is not None:
            problems.append(problem)

    if raw is None:
        return (), problems

    if isinstance(raw, Mapping):
        for key in sorted(raw, key=str):
            _collect(_from_pair(key, raw[key]))
    elif isinstance(raw, (list, tuple)):
        items = list(raw)
        position = 0
        while position < len(items):
            item = items[position]
            if isinstance(item, ActionEntry):
                entries.append(item)
                position += 1
            elif isinstance(item, Mapping):
                _collect(_from_expanded(item))
                position += 1
            elif isinstance(item, str):
                info = items[position + 1] if position + 1 < len(items) else None
                _collect(_from_pair(item, info))
                position += 2
            else:
                problems.append(f"unsupported action item {item!r}")
                position += 1
    else:
        problems.append(f"unsupported actions value of type {type(raw).__name__}")

    return tuple(entries), problems


def validate_actions(raw: Any) -> tuple[bool, str | None]:
    """Structural check for caller supplied actions. Returns (ok, error)."""
    if not isinstance(raw, (Mapping, list, tuple)):
        return False, "Invalid actions data"
    _entries, problems = normalize_actions(raw)
    if problems:
        return False, "Invalid actions data"
    return True, None


def resolve_actions(entries: Iterable[ActionEntry], from_status: str | None) -> list[ActionEntry]:
    """Actions available from ``from_status``.

    Keeps entries defined for ``from_status`` and wildcard entries that do
    not lead back to ``from_status``. A wildcard ``* -> X`` is dropped when a
    concrete ``Y -> X`` is among the candidates.
    """
    if not from_status:
        return []
    current = from_status.lower()
    candidates = [
        entry
        for entry in entries
        if entry.from_status.lower() == current
        or (entry.is_wildcard and entry.to_status.lower() != current)
    ]
    concrete_targets = {
        entry.to_status.lower() for entry in candidates if not entry.is_wildcard
    }
    return [
        entry
        for entry in candidates
        if not (entry.is_wildcard and entry.to_status.lower() in concrete_targets)
    ]


def actions_to_raw(entries: Iterable[ActionEntry]) -> list[dict[str, Any]]:
    """Expanded list form used when persisting normalized actions."""
    return [entry.to_dict() for entry in entries]
