"""Identifier helpers."""

from __future__ import annotations

import uuid


def generate_uuid() -> str:
    """Generate a new UUID as string."""
    return str(uuid.uuid4())


def generate_task_id() -> str:
    """Generate a task id such as ``task_3f2c9a1b7d4e``."""
    return f"task_{uuid.uuid4().hex[:12]}"


def resolve_task_id(prefix: str, task_ids: list[str]) -> str | None:
    """Resolve a full task id from a unique prefix.

    The ``task_`` marker may be omitted, so ``3f2c`` matches
    ``task_3f2c9a1b7d4e``. An exact match always wins.

    Returns:
        The matching id, or None when nothing or more than one id matches
    """
    if prefix in task_ids:
        return prefix
    candidates = [prefix] if prefix.startswith("task_") else [prefix, f"task_{prefix}"]
    matches = {tid for tid in task_ids for c in candidates if tid.startswith(c)}
    if len(matches) == 1:
        return matches.pop()
    return None


def resolve_task_ref(ref: str, task_ids: list[str]) -> str:
    """Like ``resolve_task_id`` but raises instead of returning None.

    Raises:
        TaskNotFoundError: If no id matches
        ValidationError: If the prefix matches more than one id
    """
    from todry.models.exceptions import TaskNotFoundError, ValidationError

    resolved = resolve_task_id(ref, task_ids)
    if resolved is not None:
        return resolved
    stem = ref if ref.startswith("task_") else f"task_{ref}"
    matches = [tid for tid in task_ids if tid.startswith(stem) or tid.startswith(ref)]
    if matches:
        raise ValidationError(
            f"Ambiguous task id '{ref}' matches {len(matches)} tasks: {', '.join(matches[:3])}"
        )
    raise TaskNotFoundError(f"Task not found: {ref}")


def shortest_unique_prefixes(task_ids: list[str]) -> dict[str, str]:
    """Shortest prefix (after ``task_``) telling each id apart from the rest.

    At least four characters are kept so prefixes stay readable.
    """
    result = {}
    for task_id in task_ids:
        body = task_id.removeprefix("task_")
        others = [tid.removeprefix("task_") for tid in task_ids if tid != task_id]
        for length in range(min(4, len(body)), len(body) + 1):
            prefix = body[:length]
            if not any(other.startswith(prefix) for other in others):
                result[task_id] = prefix
                break
        else:
            result[task_id] = task_id
    return result
