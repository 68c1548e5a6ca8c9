"""Run summary rendering.

`render` is pure; `emit` is the only function here with a side effect.
"""

from __future__ import annotations

import sys
from typing import TextIO

from checkkit.errors import ReportingError
from checkkit.ledger import Ledger

OK_LABEL = "OK"
ERROR_LABEL = "ERROR"
ALL_PASSED = "All checks passed"
SOME_FAILED = "Some checks failed"


def exit_code_for(verdict: bool) -> int:
    return 0 if verdict else 1


def render(ledger: Ledger) -> tuple[str, int]:
    verdict = ledger.verdict()
    lines = [
        f"- {outcome.name} : {OK_LABEL if outcome.success else ERROR_LABEL}" for outcome in ledger
    ]
    lines.append(ALL_PASSED if verdict else SOME_FAILED)
    return "\n".join(lines) + "\n", exit_code_for(verdict)


def emit(text: str, stream: TextIO | None = None) -> None:
    target = stream if stream is not None else sys.stdout
    try:
        target.write(text)
        target.flush()
    except (OSError, ValueError) as exc:
        # ValueError: write to a closed stream.
        raise ReportingError(f"Failed to write check report: {exc}") from exc
