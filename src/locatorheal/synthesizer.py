"""Alternative locator synthesis from a live element's attributes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .logging_setup import get_logger
from .models import LocatorStrategy, StrategyKind
from .provider import ElementHandle, ElementProvider
from .selector_rules import build_class_selector, build_id_selector, build_name_selector, clean_attribute

TEST_ID_ATTRIBUTE = "data-testid"


@dataclass(frozen=True, slots=True)
class AttributeRule:
    source: str
    kind: StrategyKind
    priority: int
    build: Callable[[str], str | None]


def _raw(value: str) -> str | None:
    return value


def _trimmed(value: str) -> str | None:
    return value.strip() or None


# One row per attribute category; text is read from the text content, not an attribute.
ATTRIBUTE_RULES: tuple[AttributeRule, ...] = (
    AttributeRule(TEST_ID_ATTRIBUTE, StrategyKind.TEST_ID, 1, _raw),
    # Ids that are not valid CSS identifiers export as [id="..."] instead of #id.
    AttributeRule("id", StrategyKind.CSS, 2, build_id_selector),
    AttributeRule("name", StrategyKind.CSS, 3, build_name_selector),
    AttributeRule("aria-label", StrategyKind.LABEL, 4, _raw),
    AttributeRule("placeholder", StrategyKind.PLACEHOLDER, 5, _raw),
    AttributeRule("role", StrategyKind.ROLE, 6, _raw),
    AttributeRule("text", StrategyKind.TEXT, 7, _trimmed),
    AttributeRule("class", StrategyKind.CSS, 8, build_class_selector),
)


class StrategySynthesizer:
    def __init__(
        self,
        provider: ElementProvider,
        probe_timeout_ms: int = 1000,
        logger: logging.Logger | None = None,
    ) -> None:
        self.provider = provider
        self.probe_timeout_ms = probe_timeout_ms
        self.logger = logger or get_logger("synthesizer")

    def synthesize(self, original_locator: str, context: str | None = None) -> list[LocatorStrategy]:
        if context:
            self.logger.debug("Synthesizing strategies for %s (context: %s)", original_locator, context)
        try:
            element = self.provider.resolve(StrategyKind.CSS, original_locator)
            if not element.is_visible(self.probe_timeout_ms):
                return []
            attributes = read_element_attributes(element)
        except Exception as exc:
            self.logger.warning("Could not extract element attributes for %s: %s", original_locator, exc)
            return []
        return build_strategies(attributes)


def read_element_attributes(element: ElementHandle) -> dict[str, str | None]:
    attributes: dict[str, str | None] = {}
    for rule in ATTRIBUTE_RULES:
        if rule.source == "text":
            attributes[rule.source] = _read_optional(element.text_content)
        else:
            attributes[rule.source] = _read_optional(element.get_attribute, rule.source)
    return attributes


def _read_optional(read: Callable[..., str | None], *args: str) -> str | None:
    # A failing read means "absent" and must not stop the remaining reads.
    try:
        return clean_attribute(read(*args))
    except Exception:
        return None


def build_strategies(attributes: dict[str, str | None]) -> list[LocatorStrategy]:
    strategies: list[LocatorStrategy] = []
    for rule in ATTRIBUTE_RULES:
        raw = attributes.get(rule.source)
        if not raw or not raw.strip():
            continue
        value = rule.build(raw)
        if not value:
            continue
        strategies.append(LocatorStrategy(kind=rule.kind, value=value, priority=rule.priority))
    # sorted() is stable, so equal priorities keep synthesis order.
    return sorted(strategies, key=lambda strategy: strategy.priority)
