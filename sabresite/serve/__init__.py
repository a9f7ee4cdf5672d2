"""Local preview: file watching and HTTP serving."""

from sabresite.serve.server import PreviewServer
from sabresite.serve.watcher import SiteWatcher

__all__ = [
    "PreviewServer",
    "SiteWatcher",
]
