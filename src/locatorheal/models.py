from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

CACHED_STRATEGY = "cached"


class StrategyKind(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    ROLE = "role"
    TEST_ID = "testId"
    LABEL = "label"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True, slots=True)
class LocatorStrategy:
    kind: StrategyKind
    value: str
    priority: int

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError(f"{self.kind.value} strategy requires a non-empty value.")


@dataclass(slots=True)
class HealingResult:
    original_locator: str
    success: bool
    healed_locator: str | None = None
    strategy_kind: str | None = None
    attempts: int = 0
    strategy: LocatorStrategy | None = None

    def __post_init__(self) -> None:
        if self.success and not self.healed_locator:
            raise ValueError("Successful healing result requires a healed locator.")

    @property
    def from_cache(self) -> bool:
        return self.strategy_kind == CACHED_STRATEGY


@dataclass(frozen=True, slots=True)
class HealingStats:
    total_attempts: int
    successful: int
    failed: int
    success_rate: float
    cached_locators: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalAttempts": self.total_attempts,
            "successful": self.successful,
            "failed": self.failed,
            "successRate": self.success_rate,
            "cachedLocators": self.cached_locators,
        }


@dataclass(frozen=True, slots=True)
class HealedLocator:
    original: str
    healed: str
    strategy_kind: str

    def as_dict(self) -> dict[str, str]:
        return {
            "original": self.original,
            "healed": self.healed,
            "strategy": self.strategy_kind,
        }
