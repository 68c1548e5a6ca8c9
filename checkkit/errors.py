"""Error taxonomy for check runs.

Step failures are not exceptions: they are recorded as `StepOutcome(success=False)`
and the run continues. Only the errors below interrupt a run.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """The check matrix or its configuration is invalid; raised before any command runs."""


class ReportingError(RuntimeError):
    """The final report could not be written."""
