"""OutputWriter — writes rendered pages and static files into the build directory."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes files beneath a single output directory.

    Every destination is resolved and checked against the output root so a
    hostile permalink such as ``/../../etc/passwd`` cannot escape it.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    def destination(self, rel_path: str) -> Path:
        dest = self.output_dir / rel_path.lstrip("/")
        if not dest.resolve().is_relative_to(self.output_dir.resolve()):
            raise ValueError(f"Output path escapes build directory: {rel_path}")
        return dest

    def write(self, rel_path: str, content: str) -> Path:
        """Write text content. Returns the Path of the written file."""
        dest = self.destination(rel_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with open(dest, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        logger.debug("Wrote %s (%d chars)", dest, len(content))
        return dest

    def copy(self, source: Path, rel_path: str) -> Path:
        """Copy a static file byte-for-byte."""
        dest = self.destination(rel_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
        return dest

    def clean(self, protect: list[Path] | None = None) -> None:
        """Remove the output directory.

        Refuses when the output directory is, or contains, a protected path
        (the content root or the working directory).
        """
        if not self.output_dir.exists():
            return
        out = self.output_dir.resolve()
        for p in [Path.cwd(), *(protect or [])]:
            target = p.resolve()
            if target == out or target.is_relative_to(out):
                raise ValueError(f"Refusing to clean {self.output_dir}: it contains {p}")
        shutil.rmtree(out)
        logger.info("Cleaned %s", self.output_dir)
