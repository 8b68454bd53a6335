"""All-or-nothing emission of generation plans.

The emitter renders every artifact of every plan in memory first, checks
for collisions with existing files, and only then writes.  If any write
fails, files created by this run are removed, overwritten files are
restored, and directories it created are pruned, so the target project is
never left with half an entity.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from jinja2 import TemplateError, TemplateNotFound

from ..planner.errors import EmissionError
from ..planner.models import ArtifactKind, GenerationPlan
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class RenderedArtifact:
    """A rendered artifact ready to be written."""

    kind: ArtifactKind
    entity: str
    path: Path
    content: str


@dataclass
class _WriteJournal:
    """What a run has changed on disk, for rollback."""

    created_files: list[Path] = field(default_factory=list)
    backups: dict[Path, bytes] = field(default_factory=dict)
    created_dirs: list[Path] = field(default_factory=list)


class ScaffoldEmitter:
    """Writes rendered plans into a project directory.

    Args:
        project_root: Root of the target project; artifact target
            identifiers are resolved relative to it.
        renderer: Template renderer; a default one is created if omitted.
        force: Overwrite existing files instead of refusing.
    """

    def __init__(
        self,
        project_root: str | Path,
        renderer: TemplateRenderer | None = None,
        *,
        force: bool = False,
    ) -> None:
        self.project_root = Path(project_root)
        self.renderer = renderer or TemplateRenderer()
        self.force = force

    # -- Public API --------------------------------------------------------

    def render_plan(self, plan: GenerationPlan) -> list[RenderedArtifact]:
        """Render every artifact of *plan* without touching the filesystem.

        Raises:
            EmissionError: If a template is missing or fails to render.
        """
        entity = plan.config.entity_name
        rendered: list[RenderedArtifact] = []
        for descriptor in plan.artifacts:
            template = descriptor.content.template
            try:
                content = self.renderer.render_binding(descriptor.content)
            except TemplateNotFound as exc:
                searched = ", ".join(str(p) for p in self.renderer.search_path)
                raise EmissionError(
                    f"template {template!r} not found in {searched}",
                    entity=entity,
                ) from exc
            except TemplateError as exc:
                raise EmissionError(
                    f"failed to render {template!r}: {exc}",
                    paths=[descriptor.target_identifier],
                    entity=entity,
                ) from exc
            rendered.append(RenderedArtifact(
                kind=descriptor.kind,
                entity=entity,
                path=self.project_root / descriptor.target_identifier,
                content=content,
            ))
        return rendered

    async def emit(self, plan: GenerationPlan) -> list[Path]:
        """Render and write one plan.  See :meth:`emit_all`."""
        return await self.emit_all([plan])

    async def emit_all(self, plans: Iterable[GenerationPlan]) -> list[Path]:
        """Render and write several plans as one unit.

        Returns:
            Paths written, in plan order.

        Raises:
            EmissionError: On render failure, on collisions with existing
                files (unless ``force``), or on a write failure.  In every
                case the project is left exactly as it was.
        """
        rendered: list[RenderedArtifact] = []
        for plan in plans:
            rendered.extend(self.render_plan(plan))

        self._check_collisions(rendered)

        journal = _WriteJournal()
        try:
            for artifact in rendered:
                await asyncio.to_thread(self._write, artifact, journal)
        except OSError as exc:
            logger.error("write failed (%s); rolling back %d files", exc, len(journal.created_files))
            await asyncio.to_thread(self._rollback, journal)
            raise EmissionError(
                f"failed to write generated files: {exc}",
                paths=[str(a.path) for a in rendered],
            ) from exc

        for artifact in rendered:
            logger.info("wrote %s", artifact.path)
        return [a.path for a in rendered]

    # -- Internals ---------------------------------------------------------

    def _check_collisions(self, rendered: list[RenderedArtifact]) -> None:
        seen: set[Path] = set()
        duplicates = []
        for artifact in rendered:
            if artifact.path in seen:
                duplicates.append(str(artifact.path))
            seen.add(artifact.path)
        if duplicates:
            raise EmissionError(
                "several artifacts target the same file: " + ", ".join(duplicates),
                paths=duplicates,
            )
        if self.force:
            return
        existing = [str(a.path) for a in rendered if a.path.exists()]
        if existing:
            raise EmissionError(
                "refusing to overwrite existing files (use --force): " + ", ".join(existing),
                paths=existing,
            )

    def _write(self, artifact: RenderedArtifact, journal: _WriteJournal) -> None:
        """Synchronous helper: create parent dirs and write, recording changes."""
        path = artifact.path
        missing = []
        parent = path.parent
        while not parent.exists():
            missing.append(parent)
            parent = parent.parent
        for directory in reversed(missing):
            directory.mkdir()
            journal.created_dirs.append(directory)

        if path.exists():
            journal.backups[path] = path.read_bytes()
        else:
            journal.created_files.append(path)
        path.write_text(artifact.content, encoding="utf-8")

    def _rollback(self, journal: _WriteJournal) -> None:
        """Undo everything recorded in *journal*."""
        for path, original in journal.backups.items():
            path.write_bytes(original)
        for path in reversed(journal.created_files):
            path.unlink(missing_ok=True)
        for directory in reversed(journal.created_dirs):
            if directory.exists() and not any(directory.iterdir()):
                directory.rmdir()
