"""Self-healing element resolution.

``HealingEngine`` resolves a locator through an :class:`ElementProvider` and,
when the locator no longer matches a visible element, synthesizes
alternatives from the element's other attributes, tries them in priority
order and caches the first one that works. Every fresh healing outcome is
kept in a :class:`HealingLedger` for statistics and export.

One engine serves one logical test thread. Concurrent tests should each
construct their own engine; cache and ledger writes are not synchronized.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import LocatorHealingError, ProviderNotBoundError
from .ledger import HealingLedger
from .logging_setup import build_logger, get_logger
from .models import CACHED_STRATEGY, HealedLocator, HealingResult, HealingStats, LocatorStrategy, StrategyKind
from .provider import WAIT_STATES, ElementHandle, ElementProvider, PlaywrightElementProvider, WaitState
from .settings import HealerSettings
from .synthesizer import StrategySynthesizer

if TYPE_CHECKING:
    from playwright.sync_api import Page


class HealingEngine:
    def __init__(
        self,
        provider: ElementProvider | None = None,
        settings: HealerSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings or HealerSettings()
        self.logger = logger or get_logger("engine")
        self.ledger = HealingLedger()
        self._cache: dict[str, LocatorStrategy] = {}
        self._provider: ElementProvider | None = None
        self._synthesizer: StrategySynthesizer | None = None
        if provider is not None:
            self.bind(provider)

    @classmethod
    def for_page(
        cls,
        page: Page,
        settings: HealerSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> HealingEngine:
        resolved = settings or HealerSettings()
        if logger is None:
            logger = build_logger(resolved.log_dir, resolved.log_level).getChild("engine")
        provider = PlaywrightElementProvider(page, read_timeout_ms=resolved.probe_timeout_ms)
        return cls(provider, settings=resolved, logger=logger)

    def bind(self, provider: ElementProvider) -> None:
        self._provider = provider
        self._synthesizer = StrategySynthesizer(
            provider,
            probe_timeout_ms=self.settings.probe_timeout_ms,
            logger=self.logger.getChild("synthesizer"),
        )

    @property
    def provider(self) -> ElementProvider:
        if self._provider is None:
            raise ProviderNotBoundError()
        return self._provider

    @property
    def synthesizer(self) -> StrategySynthesizer:
        if self._synthesizer is None:
            raise ProviderNotBoundError()
        return self._synthesizer

    def heal_locator(self, original_locator: str, context: str | None = None) -> HealingResult:
        provider = self.provider
        if not original_locator or not original_locator.strip():
            raise ValueError("Locator to heal must be a non-empty string.")

        self.logger.info("Attempting to heal locator: %s", original_locator)

        cached = self._cached_strategy(original_locator)
        if cached is not None:
            self.logger.info("Using cached healed locator: %s", cached.value)
            return HealingResult(
                original_locator=original_locator,
                success=True,
                healed_locator=cached.value,
                strategy_kind=CACHED_STRATEGY,
                attempts=0,
                strategy=cached,
            )

        strategies = self.synthesizer.synthesize(original_locator, context)
        attempts = 0
        for strategy in strategies:
            attempts += 1
            if not self._is_strategy_visible(provider, strategy):
                continue

            self.logger.info("Successfully healed locator using %s: %s", strategy.kind.value, strategy.value)
            self._cache[original_locator] = strategy
            result = HealingResult(
                original_locator=original_locator,
                success=True,
                healed_locator=strategy.value,
                strategy_kind=strategy.kind.value,
                attempts=attempts,
                strategy=strategy,
            )
            self.ledger.record(result)
            return result

        result = HealingResult(original_locator=original_locator, success=False, attempts=attempts)
        self.ledger.record(result)
        self.logger.error("Failed to heal locator after %s attempts: %s", attempts, original_locator)
        return result

    def find_element(
        self,
        locator: str,
        *,
        timeout_ms: int | None = None,
        enable_healing: bool = True,
        context: str | None = None,
    ) -> ElementHandle:
        provider = self.provider
        timeout = timeout_ms or self.settings.find_timeout_ms
        try:
            element = provider.resolve(StrategyKind.CSS, locator)
            element.wait_for("visible", timeout)
            return element
        except Exception:
            if not enable_healing:
                raise
            self.logger.warning("Original locator failed, attempting to heal: %s", locator)

        result = self.heal_locator(locator, context)
        if result.success and result.strategy is not None:
            self.logger.info("Using healed locator: %s", result.healed_locator)
            return provider.resolve(result.strategy.kind, result.strategy.value)
        raise LocatorHealingError(locator, result)

    def click(
        self,
        locator: str,
        *,
        timeout_ms: int | None = None,
        enable_healing: bool = True,
        context: str | None = None,
    ) -> None:
        self.logger.info("Clicking element: %s", locator)
        element = self.find_element(locator, timeout_ms=timeout_ms, enable_healing=enable_healing, context=context)
        element.click()

    def fill(
        self,
        locator: str,
        value: str,
        *,
        timeout_ms: int | None = None,
        enable_healing: bool = True,
        context: str | None = None,
    ) -> None:
        self.logger.info("Filling element: %s with value: %s", locator, value)
        element = self.find_element(locator, timeout_ms=timeout_ms, enable_healing=enable_healing, context=context)
        element.fill(value)

    def get_text(
        self,
        locator: str,
        *,
        timeout_ms: int | None = None,
        enable_healing: bool = True,
        context: str | None = None,
    ) -> str:
        self.logger.info("Getting text from element: %s", locator)
        element = self.find_element(locator, timeout_ms=timeout_ms, enable_healing=enable_healing, context=context)
        return element.read_text(timeout_ms or self.settings.find_timeout_ms) or ""

    def wait_for(
        self,
        locator: str,
        *,
        state: WaitState = "visible",
        timeout_ms: int | None = None,
        enable_healing: bool = True,
        context: str | None = None,
    ) -> None:
        if state not in WAIT_STATES:
            raise ValueError(f"state must be one of {', '.join(WAIT_STATES)}.")
        self.logger.info("Waiting for element: %s", locator)
        element = self.find_element(locator, timeout_ms=timeout_ms, enable_healing=enable_healing, context=context)
        element.wait_for(state, timeout_ms or self.settings.find_timeout_ms)

    def get_healing_stats(self) -> HealingStats:
        return self.ledger.stats(cached_locators=len(self._cache))

    def get_healing_history(self) -> dict[str, HealingResult]:
        return self.ledger.history()

    def export_healed_locators(self) -> list[HealedLocator]:
        exported = self.ledger.export()
        self.logger.info("Exported %s healed locators", len(exported))
        return exported

    def clear_cache(self) -> None:
        self._cache.clear()
        self.logger.info("Healer cache cleared")

    def cached_locator(self, original_locator: str) -> str | None:
        cached = self._cache.get(original_locator)
        return cached.value if cached else None

    def _cached_strategy(self, original_locator: str) -> LocatorStrategy | None:
        cached = self._cache.get(original_locator)
        if cached is None or not self.settings.revalidate_cached:
            return cached
        if self._is_strategy_visible(self.provider, cached):
            return cached
        self.logger.info("Cached locator is stale, healing again: %s", cached.value)
        del self._cache[original_locator]
        return None

    def _is_strategy_visible(self, provider: ElementProvider, strategy: LocatorStrategy) -> bool:
        try:
            return provider.resolve(strategy.kind, strategy.value).is_visible(self.settings.strategy_timeout_ms)
        except Exception as exc:
            self.logger.debug("Strategy %s failed: %s", strategy.kind.value, exc)
            return False
