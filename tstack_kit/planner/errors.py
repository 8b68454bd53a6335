"""Error taxonomy for scaffold planning and emission.

Every problem the planner can detect is a :class:`ScaffoldError`.  The
normalizer and the validator collect *all* problems they find and raise a
single :class:`PlanningFailed` wrapping them, so a user can fix an entire
configuration in one pass.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ScaffoldError(Exception):
    """Base class for every planning and emission error."""

    def __init__(
        self,
        message: str,
        *,
        entity: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        self.message = message
        self.entity = entity
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        prefix = ""
        if self.entity:
            prefix += f"[{self.entity}] "
        if self.field:
            prefix += f"{self.field}: "
        return f"{prefix}{self.message}"


class InvalidIdentifier(ScaffoldError):
    """An entity or field name cannot be turned into code identifiers."""


class ConfigurationError(ScaffoldError):
    """Options are contradictory, missing, or unrecognised."""


class PlanError(ScaffoldError):
    """An assembled plan failed a post-build consistency check."""

    def __init__(
        self,
        message: str,
        *,
        entity: Optional[str] = None,
        field: Optional[str] = None,
        artifact: Optional[str] = None,
    ) -> None:
        self.artifact = artifact
        super().__init__(message, entity=entity, field=field)


class EmissionError(ScaffoldError):
    """Rendering or writing the planned files failed; nothing was kept."""

    def __init__(self, message: str, paths: Sequence[str] = (), **kwargs) -> None:
        self.paths = list(paths)
        super().__init__(message, **kwargs)


class PlanningFailed(ScaffoldError):
    """Aggregate of one or more errors that aborted planning."""

    def __init__(self, errors: Sequence[ScaffoldError]) -> None:
        if not errors:
            raise ValueError("PlanningFailed requires at least one error")
        self.errors: list[ScaffoldError] = list(errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        super().__init__(
            f"planning failed with {len(self.errors)} {noun}: "
            + "; ".join(str(e) for e in self.errors)
        )
