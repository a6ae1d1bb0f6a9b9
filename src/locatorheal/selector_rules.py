from __future__ import annotations

import re
from typing import Sequence

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)

_CSS_SAFE_ID_PATTERN = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")


def is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def clean_attribute(value: str | None) -> str | None:
    """Map blank attribute values to ``None``; non-blank values are returned unchanged."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def is_css_safe_id(value: str) -> bool:
    return bool(_CSS_SAFE_ID_PATTERN.fullmatch(value))


def escape_css_attribute_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_id_selector(raw_id: str) -> str:
    if is_css_safe_id(raw_id):
        return f"#{raw_id}"
    return f'[id="{escape_css_attribute_value(raw_id)}"]'


def build_name_selector(name: str) -> str:
    return f'[name="{escape_css_attribute_value(name)}"]'


def normalize_classes(raw: Sequence[str] | str | None) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [item for item in raw if isinstance(item, str)]

    seen: set[str] = set()
    normalized: list[str] = []
    for item in items:
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        normalized.append(clean)
    return normalized


def build_class_selector(raw: Sequence[str] | str | None) -> str | None:
    classes = normalize_classes(raw)
    if not classes:
        return None
    return "." + ".".join(classes)


def as_xpath_selector(value: str) -> str:
    text = value.strip()
    if text.startswith("xpath="):
        return text
    return f"xpath={text}"
