"""Shared test fixtures for sabresite."""

from pathlib import Path

import pytest

from sabresite.config.models import BuildConfig, EnvironmentConfig, SiteConfig


DEFAULT_LAYOUT = """\
<html><head><title>{{ page.title }} | {{ site.title }}</title></head>
<body>{{ content }}</body></html>
"""

DOCS_LAYOUT = """\
<nav>{% for label, url in page.versions.items() %}<a href="{{ url }}">{{ label }}</a>{% endfor %}</nav>
<main>{{ content }}</main>
"""

INDEX_MD = """\
---
title: Home
layout: default
---

# Welcome

Read the [DAV intro](dav/intro.md) first.
"""

DAV_INTRO_MD = """\
---
title: Introduction
layout: docs
thisversion: "3.x"
versions:
    "2.x": /dav/2.x/intro/
    "3.x": /dav/intro/
---

Back to [home](/).

![logo](/img/logo.png)
"""

DAV_2X_INTRO_MD = """\
---
title: Introduction
layout: docs
thisversion: "2.x"
versions:
    "2.x": /dav/2.x/intro/
    "3.x": /dav/intro/
---

This is the [current version](../intro.md).
"""


def write_page(source: Path, rel: str, content: str) -> Path:
    path = source / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def make_site(root: Path) -> Path:
    """Create a small content root with layouts, pages and static files."""
    source = root / "source"
    write_page(source, "_layouts/default.html", DEFAULT_LAYOUT)
    write_page(source, "_layouts/docs.html", DOCS_LAYOUT)
    write_page(source, "index.md", INDEX_MD)
    write_page(source, "dav/intro.md", DAV_INTRO_MD)
    write_page(source, "dav/2.x/intro.md", DAV_2X_INTRO_MD)
    (source / "img").mkdir()
    (source / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
    write_page(source, "css/site.css", "body { color: #333; }\n")
    return source


def make_config(root: Path, source: Path, **build) -> SiteConfig:
    return SiteConfig(
        build=BuildConfig(
            source_dir=str(source),
            environments={
                "dev": EnvironmentConfig(output_dir=str(root / "output_dev")),
                "prod": EnvironmentConfig(output_dir=str(root / "output_prod"), url="https://sabre.io"),
            },
            **build,
        )
    )


@pytest.fixture
def sample_config():
    return SiteConfig()


@pytest.fixture
def site_source(tmp_path):
    return make_site(tmp_path)


@pytest.fixture
def site_config(tmp_path, site_source):
    return make_config(tmp_path, site_source)
