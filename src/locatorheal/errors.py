from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import HealingResult


class HealerError(RuntimeError):
    """Base class for errors raised by the healing engine."""


class ProviderNotBoundError(HealerError):
    """Raised when the engine is used before an element provider is attached."""

    def __init__(self) -> None:
        super().__init__("No element provider bound. Call bind() or use HealingEngine.for_page() first.")


class LocatorHealingError(HealerError):
    """Raised when a locator fails directly and no synthesized alternative is visible."""

    def __init__(self, locator: str, result: HealingResult | None = None) -> None:
        super().__init__(f"Could not heal locator: {locator}")
        self.locator = locator
        self.result = result
