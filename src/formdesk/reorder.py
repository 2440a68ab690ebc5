from __future__ import annotations

from typing import Any, Sequence


def _index_of(sequence: Sequence[dict[str, Any]], item_id: str) -> int:
    for index, item in enumerate(sequence):
        if item.get("id") == item_id:
            return index
    return -1


def reorder(
    sequence: Sequence[dict[str, Any]], source_id: str, target_id: str
) -> list[dict[str, Any]]:
    """Move the item ``source_id`` to the position held by ``target_id``.

    Every other item keeps its relative order. Unknown ids, or a drop onto
    the dragged item itself, return the sequence unchanged. The input is
    never mutated.
    """
    items = list(sequence)
    if source_id == target_id:
        return items
    old_index = _index_of(items, source_id)
    new_index = _index_of(items, target_id)
    if old_index < 0 or new_index < 0:
        return items
    moved = items.pop(old_index)
    items.insert(new_index, moved)
    return items
