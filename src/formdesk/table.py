"""In-memory search, filter, sort and pagination for the database viewer."""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Sequence

Accessor = Callable[[dict[str, Any]], Any]
FILTER_ALL = "all"


def _accessor(spec: str | Accessor) -> Accessor:
    if callable(spec):
        return spec
    return lambda item: item.get(spec)


def _kind(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return "number"
    return type(value).__name__


def _sort_key(value: Any, as_text: bool = False) -> tuple[int, Any]:
    if value is None or value == "":
        return (1, "")
    if as_text or isinstance(value, str):
        return (0, str(value).lower())
    return (0, value)


class TableController:
    """Holds one view over a collection.

    ``search_fields`` lists the string attributes the free-text search looks
    at; ``filter_fields`` and ``sort_fields`` map a public name to an item
    key or an accessor; a filter may instead be a predicate taking the item
    and the selected value. Changing search, filters, sort or page size moves
    back to page 1.
    """

    def __init__(
        self,
        items: Sequence[dict[str, Any]],
        search_fields: Sequence[str | Accessor] = (),
        filter_fields: Mapping[str, str | Callable[[dict[str, Any], Any], bool]] | None = None,
        sort_fields: Mapping[str, str | Accessor] | None = None,
        page_size: int = 10,
        sort_by: str | None = None,
        sort_order: str = "asc",
    ) -> None:
        self._items = list(items)
        self._search_accessors = [_accessor(spec) for spec in search_fields]
        self._filter_specs = dict(filter_fields or {})
        self._sort_accessors = {
            name: _accessor(spec) for name, spec in (sort_fields or {}).items()
        }
        self.search = ""
        self.filters: dict[str, Any] = {}
        self.sort_by = sort_by if sort_by in self._sort_accessors else None
        self.sort_order = "desc" if sort_order == "desc" else "asc"
        self.page_size = max(1, int(page_size))
        self.current_page = 1

    @property
    def sortable(self) -> list[str]:
        return list(self._sort_accessors)

    @property
    def filterable(self) -> list[str]:
        return list(self._filter_specs)

    def set_items(self, items: Sequence[dict[str, Any]]) -> None:
        self._items = list(items)
        self.current_page = min(self.current_page, self.total_pages)

    def set_search(self, text: str | None) -> None:
        self.search = (text or "").strip()
        self.current_page = 1

    def set_filter(self, name: str, value: Any) -> None:
        if name not in self._filter_specs:
            raise KeyError(name)
        if value in (None, "", FILTER_ALL):
            self.filters.pop(name, None)
        else:
            self.filters[name] = value
        self.current_page = 1

    def clear_filters(self) -> None:
        self.search = ""
        self.filters = {}
        self.current_page = 1

    def set_sort(self, sort_by: str | None, sort_order: str = "asc") -> None:
        if sort_by is not None and sort_by not in self._sort_accessors:
            raise KeyError(sort_by)
        self.sort_by = sort_by
        self.sort_order = "desc" if sort_order == "desc" else "asc"
        self.current_page = 1

    def toggle_sort(self, sort_by: str) -> None:
        """Flip direction on the active column, or sort a new column ascending."""
        if self.sort_by == sort_by:
            self.set_sort(sort_by, "asc" if self.sort_order == "desc" else "desc")
        else:
            self.set_sort(sort_by, "asc")

    def set_page_size(self, page_size: int) -> None:
        self.page_size = max(1, int(page_size))
        self.current_page = 1

    def set_page(self, page: int) -> None:
        self.current_page = min(max(1, int(page)), self.total_pages)

    def _matches_search(self, item: dict[str, Any]) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        for accessor in self._search_accessors:
            value = accessor(item)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def _matches_filters(self, item: dict[str, Any]) -> bool:
        for name, expected in self.filters.items():
            spec = self._filter_specs[name]
            if callable(spec):
                if not spec(item, expected):
                    return False
            elif item.get(spec) != expected:
                return False
        return True

    @property
    def filtered_items(self) -> list[dict[str, Any]]:
        matched = [
            item
            for item in self._items
            if self._matches_search(item) and self._matches_filters(item)
        ]
        if self.sort_by is not None:
            accessor = self._sort_accessors[self.sort_by]
            values = [accessor(item) for item in matched]
            # Columns holding more than one kind of value compare as text.
            kinds = {_kind(value) for value in values if value is not None and value != ""}
            as_text = len(kinds) > 1
            keyed = [(_sort_key(value, as_text), item) for value, item in zip(values, matched)]
            keyed.sort(key=lambda pair: pair[0], reverse=self.sort_order == "desc")
            matched = [item for _, item in keyed]
        return matched

    @property
    def total_items(self) -> int:
        return len(self.filtered_items)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_items / self.page_size))

    @property
    def page_items(self) -> list[dict[str, Any]]:
        start = (self.current_page - 1) * self.page_size
        return self.filtered_items[start : start + self.page_size]

    def snapshot(self) -> dict[str, Any]:
        filtered = self.filtered_items
        total = len(filtered)
        total_pages = max(1, math.ceil(total / self.page_size))
        start = (self.current_page - 1) * self.page_size
        return {
            "items": filtered[start : start + self.page_size],
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_items": total,
            "total_pages": total_pages,
            "search": self.search,
            "filters": dict(self.filters),
            "sort_by": self.sort_by,
            "sort_order": self.sort_order,
        }
