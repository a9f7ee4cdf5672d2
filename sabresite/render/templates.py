"""Layout resolution and rendering with Jinja2."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from sabresite.errors import LayoutNotFoundError

logger = logging.getLogger(__name__)

_LAYOUT_SUFFIX = ".html"


class LayoutResolver:
    """Resolves layout names (``default``, ``docs``) to templates in a directory.

    A layout name maps to ``<name>.html``; a name that already carries a
    file extension is used as-is. Layouts may ``{% extends %}`` one another.
    """

    def __init__(self, layouts_dir: str | Path) -> None:
        self.layouts_dir = Path(layouts_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.layouts_dir)),
            autoescape=select_autoescape(),
            keep_trailing_newline=True,
        )

    def available(self) -> list[str]:
        """Sorted layout names known to the pipeline."""
        if not self.layouts_dir.is_dir():
            return []
        names = []
        for template in self.env.list_templates():
            if template.endswith(_LAYOUT_SUFFIX):
                names.append(template[: -len(_LAYOUT_SUFFIX)])
        return sorted(names)

    def template_name(self, name: str) -> str:
        if Path(name).suffix:
            return name
        return name + _LAYOUT_SUFFIX

    def has(self, name: str) -> bool:
        """True if the layout exists. Raises TemplateSyntaxError if it does not compile."""
        try:
            self.env.get_template(self.template_name(name))
        except TemplateNotFound:
            return False
        return True

    def render(self, name: str, context: dict[str, Any]) -> str:
        """Render layout *name*. Raises LayoutNotFoundError if it is missing."""
        try:
            template = self.env.get_template(self.template_name(name))
        except TemplateNotFound as exc:
            raise LayoutNotFoundError(name, self.available()) from exc
        logger.debug("Rendering layout %s", template.name)
        return template.render(**context)
