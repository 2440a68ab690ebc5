from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from formdesk.flatten import display_text

BOM = "\ufeff"
FIRST_ROW = "first_row"
UNION = "union"


def cell_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(cell_text(item) for item in value)
    return display_text(value)


def escape_cell(value: Any) -> str:
    text = cell_text(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _union_headers(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    headers: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def to_csv(
    rows: Sequence[Mapping[str, Any]],
    bom: bool = False,
    header_mode: str = FIRST_ROW,
) -> str:
    """Serialize flat row mappings as CSV text.

    The header comes from the first row's keys. Later rows are read through
    that header: keys it lacks are dropped and missing keys become empty
    cells. ``header_mode="union"`` uses every key seen across all rows.
    """
    if not rows:
        return ""
    if header_mode == UNION:
        headers = _union_headers(rows)
    elif header_mode == FIRST_ROW:
        headers = list(rows[0].keys())
    else:
        raise ValueError(f"Unknown header mode: {header_mode}")

    lines = [",".join(escape_cell(header) for header in headers)]
    for row in rows:
        lines.append(",".join(escape_cell(row.get(header)) for header in headers))
    text = "\n".join(lines)
    return BOM + text if bom else text
