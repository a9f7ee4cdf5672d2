"""Exceptions raised while loading and rendering site content."""

from __future__ import annotations


class SiteError(Exception):
    """Base class for content and rendering failures."""


class FrontMatterError(SiteError):
    """Raised when a page's front matter cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: invalid front matter: {reason}")


class LayoutNotFoundError(SiteError):
    """Raised when a page asks for a layout that does not exist."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        msg = f"No layout named '{name}'"
        if self.available:
            msg += f" (known: {', '.join(self.available)})"
        super().__init__(msg)
