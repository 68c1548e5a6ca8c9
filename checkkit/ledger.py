from __future__ import annotations

from collections.abc import Iterator

from checkkit.engine.steps import StepOutcome
from checkkit.errors import ConfigurationError


class Ledger:
    """Ordered record of step outcomes for one run (insertion order = execution order)."""

    def __init__(self) -> None:
        self._outcomes: dict[str, StepOutcome] = {}

    def record(self, outcome: StepOutcome) -> None:
        if not isinstance(outcome, StepOutcome):
            raise TypeError(f"Ledger records StepOutcome (type={type(outcome).__name__})")
        if outcome.name in self._outcomes:
            raise ConfigurationError(f"Step recorded twice in one run: {outcome.name}")
        self._outcomes[outcome.name] = outcome

    def verdict(self) -> bool:
        if not self._outcomes:
            raise ConfigurationError("No steps were recorded; an empty run cannot pass")
        return all(outcome.success for outcome in self._outcomes.values())

    def get(self, name: str) -> StepOutcome | None:
        return self._outcomes.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._outcomes.keys())

    def failed(self) -> tuple[str, ...]:
        return tuple(name for name, outcome in self._outcomes.items() if not outcome.success)

    def __iter__(self) -> Iterator[StepOutcome]:
        return iter(self._outcomes.values())

    def __len__(self) -> int:
        return len(self._outcomes)

    def __contains__(self, name: object) -> bool:
        return name in self._outcomes
