"""
Parser for tracking-plan spreadsheets exported as CSV.

The file is semicolon separated with a header row.  Recognised columns
(case-insensitive, Russian or English): platform, block, action
description, ``Event Category``, ``Event Action``, ``Event Name``,
``Event Value`` and any number of ``dimensionN`` columns.  Rows without a
category or action are dropped.
"""
import csv
import io

DELIMITER = ";"

PLATFORM_KEYWORDS = ("web", "ios", "android", "backend")


def _find(headers, *, contains=(), equals=()):
    for i, header in enumerate(headers):
        h = header.lower()
        if any(h == e for e in equals) or any(c in h for c in contains):
            return i
    return None


def _cell(values, index) -> str:
    if index is None or index >= len(values):
        return ""
    return values[index]


def _one_line(text: str) -> str:
    return text.replace("\r", " ").replace("\n", " ").strip()


def parse_platforms(raw: str) -> list[str]:
    raw = (raw or "").lower()
    return [p for p in PLATFORM_KEYWORDS if p in raw]


def parse_csv(content: str) -> list[dict]:
    """Parse CSV text into import rows ready for the import endpoints."""
    content = (content or "").lstrip("\ufeff")
    reader = csv.reader(io.StringIO(content), delimiter=DELIMITER, quotechar='"')
    rows = [[v.strip() for v in row] for row in reader if any(v.strip() for v in row)]
    if len(rows) < 2:
        return []

    headers = rows[0]
    platform_idx = _find(headers, contains=("платформа", "platform"))
    block_idx = _find(headers, equals=("блок", "block"))
    action_desc_idx = _find(headers, equals=("действие", "description", "action description"))
    category_idx = _find(headers, contains=("event category",))
    action_idx = _find(headers, contains=("event action",))
    name_idx = _find(headers, contains=("event name",))
    value_idx = _find(headers, contains=("event value",))
    dimensions = [(i, h) for i, h in enumerate(headers) if h.lower().startswith("dimension")]

    parsed = []
    for values in rows[1:]:
        category = _cell(values, category_idx)
        action = _cell(values, action_idx)
        if not category or not action:
            continue

        value = _one_line(_cell(values, value_idx))
        properties = []
        if value:
            properties.append({"name": "eventValue", "type": "string", "required": False, "description": value})
        for index, header in dimensions:
            description = _one_line(_cell(values, index))
            if description:
                properties.append({"name": header, "type": "string", "required": False, "description": description})

        parsed.append({
            "platforms": parse_platforms(_cell(values, platform_idx)),
            "block": _cell(values, block_idx),
            "action_description": _cell(values, action_desc_idx),
            "category": category,
            "action": action,
            "name": _cell(values, name_idx),
            "value_description": value,
            "properties": properties,
        })
    return parsed
