"""Output digests and the render-twice reproducibility check."""

from __future__ import annotations

import hashlib
import logging
import tempfile
from pathlib import Path

from sabresite.build.generator import SiteGenerator
from sabresite.build.models import ReproducibilityReport
from sabresite.config.models import SiteConfig

logger = logging.getLogger(__name__)


def compute_file_hash(path: Path) -> str:
    """Full SHA-256 hex digest of a file's bytes."""
    return hashlib.sha256(path.read_bytes()).hexdigest()


def compute_digest(output_dir: str | Path) -> dict[str, str]:
    """Map every file under *output_dir* (posix relative path) to its hash."""
    root = Path(output_dir)
    if not root.is_dir():
        return {}
    return {
        path.relative_to(root).as_posix(): compute_file_hash(path)
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def compare_digests(first: dict[str, str], second: dict[str, str]) -> ReproducibilityReport:
    report = ReproducibilityReport(files=len(set(first) | set(second)))
    report.missing = sorted(set(first) ^ set(second))
    report.mismatched = sorted(
        rel for rel in set(first) & set(second) if first[rel] != second[rel]
    )
    return report


def check_reproducible(config: SiteConfig, env: str = "dev") -> ReproducibilityReport:
    """Render the site twice into fresh directories and compare the bytes."""
    digests: list[dict[str, str]] = []
    for attempt in (1, 2):
        with tempfile.TemporaryDirectory(prefix="sabresite-") as tmp:
            out = Path(tmp) / "output"
            SiteGenerator(config, env=env, output_dir=out).generate()
            digests.append(compute_digest(out))
            logger.debug("Render %d produced %d file(s)", attempt, len(digests[-1]))
    report = compare_digests(digests[0], digests[1])
    if not report.reproducible:
        logger.warning(
            "Output differs between renders: %d mismatched, %d missing",
            len(report.mismatched), len(report.missing),
        )
    return report
