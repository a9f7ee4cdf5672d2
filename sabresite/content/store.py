"""Content store: scans the content root for pages and static files."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path, PurePosixPath

from sabresite.config.models import BuildConfig
from sabresite.content.frontmatter import has_frontmatter
from sabresite.content.models import HTML_SUFFIXES, MARKDOWN_SUFFIXES, Page
from sabresite.errors import FrontMatterError

logger = logging.getLogger(__name__)


def _is_hidden(rel: PurePosixPath) -> bool:
    """Underscore or dot prefixed components are never published."""
    return any(part.startswith(("_", ".")) for part in rel.parts)


def _matches_any(rel: PurePosixPath, patterns: list[str]) -> bool:
    return any(
        fnmatch.fnmatch(part, pat) for part in rel.parts for pat in patterns
    )


class ContentStore:
    """All publishable content under a source directory.

    Markdown files are always pages. HTML files become pages only when they
    open with a front-matter block; otherwise they are copied like any
    other static file.
    """

    def __init__(self, source_dir: str | Path, ignore_patterns: list[str] | None = None) -> None:
        self.source_dir = Path(source_dir)
        self.ignore_patterns = list(ignore_patterns or [])
        self.pages: list[Page] = []
        self.static_files: list[str] = []
        self.errors: list[FrontMatterError] = []

    @classmethod
    def from_config(cls, config: BuildConfig) -> ContentStore:
        return cls(config.source_dir, config.ignore_patterns)

    def load(self) -> ContentStore:
        """Scan the source directory. Returns self for chaining."""
        self.pages = []
        self.static_files = []
        self.errors = []

        if not self.source_dir.is_dir():
            raise ValueError(f"Source directory not found: {self.source_dir}")

        for path in sorted(self.source_dir.rglob("*")):
            if not path.is_file():
                continue
            rel = PurePosixPath(path.relative_to(self.source_dir).as_posix())
            if _is_hidden(rel) or _matches_any(rel, self.ignore_patterns):
                continue
            if self._is_page(path):
                try:
                    self.pages.append(Page.from_file(path, self.source_dir))
                except FrontMatterError as exc:
                    self.errors.append(exc)
                    logger.error("%s", exc)
                except UnicodeDecodeError as exc:
                    self.errors.append(FrontMatterError(str(rel), f"not valid UTF-8: {exc}"))
                    logger.error("%s: not valid UTF-8", rel)
            else:
                self.static_files.append(str(rel))

        logger.debug(
            "Loaded %d page(s) and %d static file(s) from %s",
            len(self.pages), len(self.static_files), self.source_dir,
        )
        return self

    @staticmethod
    def _is_page(path: Path) -> bool:
        suffix = path.suffix.lower()
        if suffix in MARKDOWN_SUFFIXES:
            return True
        if suffix in HTML_SUFFIXES:
            try:
                return has_frontmatter(path.read_text(encoding="utf-8"))
            except UnicodeDecodeError:
                return False
        return False

    # -- Lookups -------------------------------------------------------------

    def page_by_source(self, rel_path: str) -> Page | None:
        for page in self.pages:
            if page.source_path == rel_path:
                return page
        return None

    def urls(self) -> set[str]:
        """Every URL the build will publish: page permalinks and static paths."""
        published = {page.url for page in self.pages}
        published.update("/" + rel for rel in self.static_files)
        return published

    def resolves(self, url: str) -> bool:
        """True if *url* (rooted, no fragment) names something the build emits."""
        published = self.urls()
        if url in published:
            return True
        directory = url if url.endswith("/") else url + "/"
        if directory in published:
            return True
        # directory served by a static index.html
        if directory + "index.html" in published:
            return True
        if url.endswith("/index.html") and url[: -len("index.html")] in published:
            return True
        return False
