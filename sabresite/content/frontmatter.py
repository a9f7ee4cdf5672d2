"""YAML front-matter splitting and parsing for content files."""

from __future__ import annotations

import re
from typing import Any

import yaml

from sabresite.errors import FrontMatterError

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n?^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps float-looking scalars as strings.

    Version labels such as ``1.10`` or ``3.0`` must survive as written.
    """


_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [r for r in resolvers if r[0] != "tag:yaml.org,2002:float"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def normalize_newlines(text: str) -> str:
    """Strip a leading BOM and convert CRLF/CR line endings to LF."""
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split a content file into its YAML front matter and body.

    Returns (yaml_str, body). yaml_str is None if the file has no front
    matter block. An empty block (``---`` immediately followed by ``---``)
    yields an empty string.
    """
    content = normalize_newlines(content)
    m = _FRONTMATTER_RE.match(content)
    if m is None:
        return None, content
    return m.group(1), content[m.end():]


def has_frontmatter(content: str) -> bool:
    return split_frontmatter(content)[0] is not None


def parse_frontmatter(content: str, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """Parse front matter into a dict and return it with the body.

    Files without front matter yield an empty dict. Raises FrontMatterError
    when the block is not valid YAML or is not a mapping.
    """
    yaml_str, body = split_frontmatter(content)
    if yaml_str is None:
        return {}, body
    try:
        data = yaml.load(yaml_str, Loader=_FrontMatterLoader)
    except yaml.YAMLError as exc:
        raise FrontMatterError(source, f"YAML parse error: {exc}") from exc
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise FrontMatterError(source, f"expected a mapping, got {type(data).__name__}")
    return data, body


def body_start_line(content: str) -> int:
    """1-based line number where the body starts, after any front matter."""
    content = normalize_newlines(content)
    m = _FRONTMATTER_RE.match(content)
    if m is None:
        return 1
    return content.count("\n", 0, m.end()) + 1
