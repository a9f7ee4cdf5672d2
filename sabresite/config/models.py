from pydantic import BaseModel, Field
from typing import Literal


class SiteMetaConfig(BaseModel):
    title: str = "sabre.io"
    url: str = "http://localhost:8000"


class EnvironmentConfig(BaseModel):
    output_dir: str
    url: str | None = None


class BuildConfig(BaseModel):
    source_dir: str = "source"
    layouts_dir: str = "_layouts"
    default_layout: str | None = None
    markdown_extensions: list[str] = Field(
        default_factory=lambda: ["fenced_code", "tables", "toc"]
    )
    ignore_patterns: list[str] = Field(default_factory=lambda: [
        ".git", ".DS_Store", "Thumbs.db", "*.swp", "*~"
    ])
    clean: bool = True
    environments: dict[str, EnvironmentConfig] = Field(default_factory=lambda: {
        "dev": EnvironmentConfig(output_dir="output_dev"),
        "prod": EnvironmentConfig(output_dir="output_prod", url="https://sabre.io"),
    })


class ChecksConfig(BaseModel):
    validation: Literal["strict", "warn", "off"] = "strict"
    max_line_length: int = Field(default=80, gt=0)
    check_links: bool = True
    check_line_length: bool = True


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)


class WatchConfig(BaseModel):
    debounce_seconds: float = Field(default=0.5, ge=0)


class SiteConfig(BaseModel):
    site: SiteMetaConfig = Field(default_factory=SiteMetaConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

    def environment(self, name: str) -> EnvironmentConfig:
        """Return the named build environment, raising ValueError if unknown."""
        try:
            return self.build.environments[name]
        except KeyError:
            known = ", ".join(sorted(self.build.environments))
            raise ValueError(f"Unknown environment '{name}' (known: {known})") from None

    def site_url(self, env: str) -> str:
        """Base URL for *env*, falling back to ``site.url``."""
        return (self.environment(env).url or self.site.url).rstrip("/")
