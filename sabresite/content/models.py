"""Pydantic models for site content."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from sabresite.content.frontmatter import body_start_line, parse_frontmatter
from sabresite.errors import FrontMatterError

MARKDOWN_SUFFIXES = (".md", ".markdown")
HTML_SUFFIXES = (".html", ".htm")

# Front-matter keys with a meaning of their own; everything else lands in `extra`.
KNOWN_KEYS = ("title", "layout", "versions", "thisversion", "permalink")


def _scalar_to_str(value: Any, field: str) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{field} must be a string, got {type(value).__name__}")


def pretty_url(rel_path: str) -> str:
    """Map a content path to its pretty permalink.

    ``index.md`` -> ``/``, ``dav/index.md`` -> ``/dav/``,
    ``dav/intro.md`` -> ``/dav/intro/``.
    """
    stem = PurePosixPath(rel_path).with_suffix("")
    if stem.name == "index":
        parent = str(stem.parent)
        return "/" if parent == "." else f"/{parent}/"
    return f"/{stem}/"


def normalize_permalink(permalink: str) -> str:
    """Ensure a permalink is rooted and names either a file or a directory."""
    url = "/" + permalink.strip().lstrip("/")
    if url.endswith("/"):
        return url
    if PurePosixPath(url).suffix:
        return url
    return url + "/"


def url_to_output_path(url: str) -> str:
    """Relative output file for a URL: directories get an ``index.html``."""
    rel = url.lstrip("/")
    if not rel or rel.endswith("/"):
        return rel + "index.html"
    return rel


class Page(BaseModel):
    """A single documentation page: front matter plus body."""

    source_path: str
    title: str | None = None
    layout: str | None = None
    versions: dict[str, str] = Field(default_factory=dict)
    thisversion: str | None = None
    permalink: str | None = None
    body: str = ""
    body_line: int = 1
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", "layout", "thisversion", "permalink", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any, info) -> Any:
        return _scalar_to_str(value, info.field_name)

    @field_validator("versions", mode="before")
    @classmethod
    def _coerce_versions(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"versions must be a mapping, got {type(value).__name__}")
        return {
            _scalar_to_str(k, "version label"): _scalar_to_str(v, f"versions[{k}]")
            for k, v in value.items()
        }

    @classmethod
    def from_text(cls, rel_path: str, text: str) -> Page:
        """Build a Page from raw file content. Raises FrontMatterError."""
        data, body = parse_frontmatter(text, source=rel_path)
        fields = {k: data[k] for k in KNOWN_KEYS if k in data}
        extra = {k: v for k, v in data.items() if k not in KNOWN_KEYS}
        try:
            return cls(
                source_path=rel_path,
                body=body,
                body_line=body_start_line(text),
                extra=extra,
                **fields,
            )
        except ValidationError as exc:
            reasons = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise FrontMatterError(rel_path, reasons) from exc

    @classmethod
    def from_file(cls, path: Path, source_root: Path) -> Page:
        rel = path.relative_to(source_root).as_posix()
        return cls.from_text(rel, path.read_text(encoding="utf-8"))

    @property
    def is_markdown(self) -> bool:
        return self.source_path.lower().endswith(MARKDOWN_SUFFIXES)

    @property
    def url(self) -> str:
        if self.permalink:
            return normalize_permalink(self.permalink)
        return pretty_url(self.source_path)

    @property
    def output_path(self) -> str:
        return url_to_output_path(self.url)

    def template_vars(self) -> dict[str, Any]:
        """Variables exposed to layouts as ``page``; extra keys come first."""
        return {
            **self.extra,
            "title": self.title,
            "layout": self.layout,
            "versions": dict(self.versions),
            "thisversion": self.thisversion,
            "url": self.url,
            "source_path": self.source_path,
        }
