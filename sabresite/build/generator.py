"""SiteGenerator — renders the content store into an output directory."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any

from jinja2 import TemplateError
from markupsafe import Markup

from sabresite.build.models import BuildError, BuildReport
from sabresite.build.writer import OutputWriter
from sabresite.config.models import SiteConfig
from sabresite.content.models import Page
from sabresite.content.store import ContentStore
from sabresite.errors import SiteError
from sabresite.render import (
    LayoutResolver,
    LinkRewriter,
    MarkdownRenderer,
    RenderedMarkdown,
    TransformPipeline,
)

logger = logging.getLogger(__name__)


class SiteGenerator:
    def __init__(self, config: SiteConfig, env: str = "dev", output_dir: str | Path | None = None):
        """
        Args:
            config: Resolved site configuration
            env: Build environment name (selects output directory and base URL)
            output_dir: Override for the environment's output directory
        """
        environment = config.environment(env)
        self.config = config
        self.env = env
        self.site_url = config.site_url(env)
        self.source_dir = Path(config.build.source_dir)
        self.output_dir = Path(output_dir or environment.output_dir)
        self.layouts = LayoutResolver(self.source_dir / config.build.layouts_dir)
        self.markdown = MarkdownRenderer(config.build.markdown_extensions)
        self._lock = threading.Lock()

    # -- Public API ----------------------------------------------------------

    def generate(self) -> BuildReport:
        """Full build: scan content, render every page, copy static files."""
        with self._lock:
            return self._generate()

    def render_page(self, page: Page, pipeline: TransformPipeline, site: dict[str, Any]) -> str:
        """Render one page to its final HTML, wrapped in its layout if any."""
        source = pipeline.apply(page.body, page)
        if page.is_markdown:
            rendered = self.markdown.render(source)
        else:
            rendered = RenderedMarkdown(html=source)

        layout = page.layout or self.config.build.default_layout
        if not layout:
            return rendered.html
        context = {
            "site": site,
            "page": page.template_vars(),
            "content": Markup(rendered.html),
            "toc": Markup(rendered.toc),
        }
        return self.layouts.render(layout, context)

    # -- Internals -----------------------------------------------------------

    def _generate(self) -> BuildReport:
        start = time.monotonic()
        report = BuildReport(output_dir=str(self.output_dir))

        store = ContentStore.from_config(self.config.build).load()
        for exc in store.errors:
            report.errors.append(BuildError(file=exc.path, error=exc.reason))

        writer = OutputWriter(self.output_dir)
        if self.config.build.clean:
            writer.clean(protect=[self.source_dir])

        pipeline = TransformPipeline([LinkRewriter(store)])
        site = self._site_vars(store)
        claimed: dict[str, str] = {}

        for page in store.pages:
            owner = claimed.get(page.output_path)
            if owner is not None:
                msg = f"permalink {page.url} already produced by {owner}"
                report.errors.append(BuildError(file=page.source_path, error=msg))
                logger.error("%s: %s", page.source_path, msg)
                continue
            try:
                html = self.render_page(page, pipeline, site)
                writer.write(page.output_path, html)
            except (SiteError, TemplateError, ValueError, OSError) as exc:
                report.errors.append(BuildError(file=page.source_path, error=str(exc)))
                logger.error("Error rendering %s: %s", page.source_path, exc)
                continue
            claimed[page.output_path] = page.source_path
            report.pages += 1
            logger.debug("Rendered %s -> %s", page.source_path, page.output_path)

        for rel in store.static_files:
            if rel in claimed:
                logger.warning("Skipping static %s: shadowed by %s", rel, claimed[rel])
                continue
            try:
                writer.copy(self.source_dir / rel, rel)
            except (ValueError, OSError) as exc:
                report.errors.append(BuildError(file=rel, error=str(exc)))
                logger.error("Error copying %s: %s", rel, exc)
                continue
            report.static_files += 1

        report.duration = time.monotonic() - start
        logger.info(
            "Generated %d page(s), %d static file(s) into %s (%d error(s))",
            report.pages, report.static_files, self.output_dir, len(report.errors),
        )
        return report

    def _site_vars(self, store: ContentStore) -> dict[str, Any]:
        return {
            "title": self.config.site.title,
            "url": self.site_url,
            "env": self.env,
            "pages": [page.template_vars() for page in store.pages],
        }
