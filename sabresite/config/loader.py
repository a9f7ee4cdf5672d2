"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import SiteConfig


def load_config(cli_path: str | None = None) -> SiteConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./sabresite.yaml"),
        Path.home() / ".sabresite" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                if not isinstance(raw, dict):
                    raise ValueError(f"Invalid config in {path}: top level must be a mapping")
                raw = _expand_env_vars(raw)
                return SiteConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return SiteConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `sabresite config init`
DEFAULT_CONFIG_TEMPLATE = """\
# sabresite.yaml

# Site metadata, exposed to layouts as `site`
site:
  title: "sabre.io"
  url: "http://localhost:8000"

# Build
build:
  source_dir: "source"
  layouts_dir: "_layouts"       # relative to source_dir
  # default_layout: "default"   # used when a page has no layout key
  markdown_extensions: [fenced_code, tables, toc]
  clean: true                   # wipe the output directory before building
  environments:
    dev:
      output_dir: "output_dev"
    prod:
      output_dir: "output_prod"
      url: "https://sabre.io"

# Content checks
checks:
  validation: "strict"          # strict | warn | off
  max_line_length: 80
  check_links: true
  check_line_length: true

# Preview server
server:
  host: "127.0.0.1"
  port: 8000

# File watching
watch:
  debounce_seconds: 0.5

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
