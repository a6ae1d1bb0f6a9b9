from __future__ import annotations

from .models import HealedLocator, HealingResult, HealingStats


class HealingLedger:
    """Latest healing outcome per original locator, in first-seen order."""

    def __init__(self) -> None:
        self._entries: dict[str, HealingResult] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, locator: object) -> bool:
        return locator in self._entries

    def record(self, result: HealingResult) -> None:
        self._entries[result.original_locator] = result

    def get(self, locator: str) -> HealingResult | None:
        return self._entries.get(locator)

    def history(self) -> dict[str, HealingResult]:
        return dict(self._entries)

    def stats(self, cached_locators: int = 0) -> HealingStats:
        total = len(self._entries)
        successful = sum(1 for result in self._entries.values() if result.success)
        success_rate = round(100 * successful / total, 2) if total else 0.0
        return HealingStats(
            total_attempts=total,
            successful=successful,
            failed=total - successful,
            success_rate=success_rate,
            cached_locators=cached_locators,
        )

    def export(self) -> list[HealedLocator]:
        exported: list[HealedLocator] = []
        for original, result in self._entries.items():
            if not (result.success and result.healed_locator and result.strategy_kind):
                continue
            exported.append(
                HealedLocator(original=original, healed=result.healed_locator, strategy_kind=result.strategy_kind)
            )
        return exported
