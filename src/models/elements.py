"""
HTML element and attribute name tables

Read-only lookup sets consulted by the parser and the reducer.
"""

from typing import FrozenSet


# Elements that never have content nor a close tag
VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area", "base", "br", "col", "command", "embed", "hr", "img", "input",
    "keygen", "link", "meta", "param", "source", "track", "wbr",
})

# Attributes whose mere presence means "true"
BOOLEAN_ATTRIBUTES: FrozenSet[str] = frozenset({
    "allowfullscreen", "async", "autofocus", "autoplay", "checked", "compact",
    "controls", "declare", "default", "defaultchecked", "defaultmuted",
    "defaultselected", "defer", "disabled", "enabled", "formnovalidate",
    "hidden", "indeterminate", "inert", "ismap", "itemscope", "loop",
    "multiple", "muted", "nohref", "noresize", "noshade", "novalidate",
    "nowrap", "open", "pauseonexit", "readonly", "required", "reversed",
    "scoped", "seamless", "selected", "sortable", "truespeed",
    "typemustmatch", "visible",
})

# Elements whose inner whitespace is kept verbatim
WHITESPACE_PRESERVING: FrozenSet[str] = frozenset({"pre", "textarea", "script", "style"})

# Elements whose content is not markup
RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset({"script", "style"})

# Slot marker used inside custom element usages
CONTENT_ELEMENT = "eh-content"

# Slot insertion point used inside custom element definitions
PLACEHOLDER_ELEMENT = "eh-placeholder"


def void_is(name: str) -> bool:
    return name.lower() in VOID_ELEMENTS


def booleanAttribute_is(name: str) -> bool:
    return name.lower() in BOOLEAN_ATTRIBUTES


def whitespacePreserving_is(name: str) -> bool:
    return name.lower() in WHITESPACE_PRESERVING


def rawText_is(name: str) -> bool:
    return name.lower() in RAW_TEXT_ELEMENTS


def custom_is(name: str) -> bool:
    """
    Check if an element name denotes a custom element

    Custom element names contain a dash (e.g. "my-tag"). The slot marker
    and placeholder names also contain one; callers check those first.
    """
    return "-" in name
