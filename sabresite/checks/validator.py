"""Content integrity checks for documentation pages."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import urlsplit

from jinja2 import TemplateError
from pydantic import BaseModel, Field

from sabresite.config.models import SiteConfig
from sabresite.content.models import Page
from sabresite.content.store import ContentStore
from sabresite.render.links import (
    is_external,
    is_markdown_target,
    iter_inline_links,
    iter_lines,
    resolve_source,
    resolve_url,
)
from sabresite.render.templates import LayoutResolver

logger = logging.getLogger(__name__)

_LINK_DEFINITION_RE = re.compile(r"^ {0,3}\[[^\]]+\]:\s")


class ValidationResult(BaseModel):
    """Result of checking a single page."""

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    path: str = ""


def _exempt_from_line_length(line: str) -> bool:
    """Table rows, link definitions and unbreakable tokens may run long."""
    stripped = line.strip()
    if stripped.startswith("|"):
        return True
    if _LINK_DEFINITION_RE.match(line):
        return True
    return not any(ch.isspace() for ch in stripped)


class ContentValidator:
    """Checks pages for version, layout, link and style problems.

    Supports three modes via ChecksConfig.validation:
      - "strict": broken invariants → invalid, style issues → warnings
      - "warn": everything becomes a logged warning; pages stay valid
      - "off": skip validation, always return valid
    """

    def __init__(
        self,
        mode: str = "strict",
        layouts: LayoutResolver | None = None,
        default_layout: str | None = None,
        max_line_length: int = 80,
        check_links: bool = True,
        check_line_length: bool = True,
    ) -> None:
        if mode not in ("strict", "warn", "off"):
            raise ValueError(f"Unknown validation mode: {mode!r}")
        self.mode = mode
        self.layouts = layouts
        self.default_layout = default_layout
        self.max_line_length = max_line_length
        self.check_links = check_links
        self.check_line_length = check_line_length

    @classmethod
    def from_config(cls, config: SiteConfig) -> ContentValidator:
        source = Path(config.build.source_dir)
        return cls(
            mode=config.checks.validation,
            layouts=LayoutResolver(source / config.build.layouts_dir),
            default_layout=config.build.default_layout,
            max_line_length=config.checks.max_line_length,
            check_links=config.checks.check_links,
            check_line_length=config.checks.check_line_length,
        )

    def validate_store(self, store: ContentStore) -> list[ValidationResult]:
        """Check every page in a loaded store, plus pages that failed to load."""
        results: list[ValidationResult] = []
        for exc in store.errors:
            result = ValidationResult(path=exc.path)
            if self.mode != "off":
                self._add_issue(result, f"Invalid front matter: {exc.reason}")
            results.append(result)
        for page in store.pages:
            results.append(self.validate_page(page, store))
        return sorted(results, key=lambda r: r.path)

    def validate_page(self, page: Page, store: ContentStore) -> ValidationResult:
        result = ValidationResult(path=page.source_path)
        if self.mode == "off":
            return result

        self._check_versions(page, store, result)
        self._check_layout(page, result)
        if self.check_links:
            self._check_links(page, store, result)
        if self.check_line_length:
            self._check_line_length(page, result)
        return result

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _check_versions(self, page: Page, store: ContentStore, result: ValidationResult) -> None:
        if not page.versions and page.thisversion is None:
            return
        if page.thisversion is None:
            self._add_issue(result, "Field 'versions' is set but 'thisversion' is missing")
        elif page.thisversion not in page.versions:
            self._add_issue(
                result,
                f"versions has no entry for thisversion {page.thisversion!r}",
            )
        else:
            own = page.versions[page.thisversion]
            if not is_external(own):
                resolved = resolve_url(own, page.url)
                if resolved not in (page.url, page.url.rstrip("/")):
                    self._add_issue(
                        result,
                        f"versions[{page.thisversion!r}] points to {own}, not this page ({page.url})",
                        warning=True,
                    )

        if not self.check_links:
            return
        for label, target in page.versions.items():
            if is_external(target):
                continue
            resolved = resolve_url(target, page.url)
            if resolved is not None and not store.resolves(resolved):
                self._add_issue(result, f"versions[{label!r}] target {target} does not resolve")

    def _check_layout(self, page: Page, result: ValidationResult) -> None:
        if self.layouts is None:
            return
        layout = page.layout or self.default_layout
        if not layout:
            return
        try:
            found = self.layouts.has(layout)
        except TemplateError as exc:
            self._add_issue(result, f"Layout {layout!r} is invalid: {exc}")
            return
        if not found:
            known = ", ".join(self.layouts.available()) or "none"
            self._add_issue(result, f"Unknown layout {layout!r} (known: {known})")

    def _check_links(self, page: Page, store: ContentStore, result: ValidationResult) -> None:
        for ref in iter_inline_links(page.body, start_line=page.body_line):
            if is_external(ref.target):
                continue
            path = urlsplit(ref.target).path
            if not path:
                continue
            if is_markdown_target(path):
                ok = store.page_by_source(resolve_source(ref.target, page.source_path)) is not None
            else:
                ok = store.resolves(resolve_url(ref.target, page.url))
            if not ok:
                self._add_issue(result, f"line {ref.line}: broken link {ref.target}")

    def _check_line_length(self, page: Page, result: ValidationResult) -> None:
        if not page.is_markdown:
            return
        for idx, line, in_code in iter_lines(page.body):
            if in_code or len(line) <= self.max_line_length:
                continue
            if _exempt_from_line_length(line):
                continue
            self._add_issue(
                result,
                f"line {page.body_line + idx}: {len(line)} characters "
                f"(max {self.max_line_length})",
                warning=True,
            )

    def _add_issue(self, result: ValidationResult, message: str, *, warning: bool = False) -> None:
        """Add an error or warning depending on mode."""
        if self.mode == "strict":
            if warning:
                result.warnings.append(message)
            else:
                result.errors.append(message)
                result.valid = False
        elif self.mode == "warn":
            # Everything becomes a warning; page stays valid
            result.warnings.append(message)
            logger.warning("%s: %s", result.path, message)
