"""Jinja2 template rendering for entity scaffolding.

Loads the ``.j2`` templates shipped in ``tstack_kit/scaffolder/templates/``
and renders the :class:`~tstack_kit.planner.models.TemplateBinding` attached
to each planned artifact.  A project may shadow any packaged template by
placing a file with the same relative path in its own template directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..planner.models import TemplateBinding
from ..planner.naming import split_words, to_snake_case


_PACKAGED_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateRenderer:
    """Renders entity templates.

    Args:
        template_dir: Root holding the templates.  Defaults to the packaged
            templates.
        overrides: Extra directories searched *before* ``template_dir``, in
            order; missing directories are ignored.

    Undefined context variables raise instead of rendering as empty strings,
    so a binding that lacks a key fails before anything is written.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        overrides: Iterable[str | Path] = (),
    ) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else _PACKAGED_TEMPLATE_DIR
        self.search_path = [Path(p) for p in overrides if Path(p).is_dir()] + [self.template_dir]
        self.env = Environment(
            loader=FileSystemLoader([str(p) for p in self.search_path]),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["snake_case"] = to_snake_case

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render *template_path* (e.g. ``"entity/route.ts.j2"``) with *context*."""
        return self.env.get_template(template_path).render(**context)

    def render_binding(self, binding: TemplateBinding) -> str:
        """Render the template named by *binding* with its own context."""
        return self.render(binding.template, binding.context)

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted ``.j2`` paths under *prefix*, relative to the search roots.

        A template present in several roots is listed once.
        """
        found: set[str] = set()
        for root in self.search_path:
            search_dir = root / prefix if prefix else root
            if search_dir.is_dir():
                found.update(p.relative_to(root).as_posix() for p in search_dir.rglob("*.j2"))
        return sorted(found)


def _pascal_case_filter(value: str) -> str:
    """``some-thing``, ``some_thing`` or ``someThing`` -> ``SomeThing``."""
    return "".join(word.capitalize() for word in split_words(value))
