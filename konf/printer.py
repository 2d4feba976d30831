# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Canonical rendering of the parsed Document.

dump() writes Kconfig text which parses back into an equal Document,
to_dict() creates a JSON-serializable structure (used by the --format json output).
"""
from typing import Any
from typing import Dict
from typing import List

from .ast import Config
from .ast import Document
from .ast import Item
from .ast import MainMenu

_INDENT = "\t"

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote(text: str) -> str:
    """
    Return text as a double-quoted string literal. Control characters without a short escape
    are written as \\uXXXX, everything else is kept as is.
    """
    result = ['"']
    for char in text:
        if char in _ESCAPES:
            result.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            result.append(f"\\u{ord(char):04x}")
        else:
            result.append(char)
    result.append('"')
    return "".join(result)


def dump_item(item: Item) -> str:
    if isinstance(item, MainMenu):
        return f"mainmenu {quote(item.title)}\n"
    lines = [f"config {item.name}".rstrip() + "\n"]
    for field in item.fields:
        lines.append(f"{_INDENT}{field.kind.value} {quote(field.description)}\n")
    return "".join(lines)


def dump(document: Document) -> str:
    return "\n".join(dump_item(item) for item in document.items)


def item_to_dict(item: Item) -> Dict[str, Any]:
    if isinstance(item, MainMenu):
        return {"kind": "mainmenu", "title": item.title}
    fields: List[Dict[str, str]] = [
        {"kind": "typedecl", "type": field.kind.value, "description": field.description} for field in item.fields
    ]
    return {"kind": "config", "name": item.name, "fields": fields}


def to_dict(document: Document) -> Dict[str, Any]:
    return {
        "title": document.title,
        "items": [item_to_dict(item) for item in document.items],
    }


def config_summary(config: Config) -> str:
    """
    One line description of the config, e.g. "FOO (bool): Enable foo".
    """
    if not config.fields:
        return f"{config.name or '<unnamed>'}"
    first = config.fields[0]
    return f"{config.name or '<unnamed>'} ({first.kind.value}): {first.description}"
