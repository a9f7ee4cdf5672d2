"""Site generation, output writing and digests."""

from sabresite.build.digest import check_reproducible, compare_digests, compute_digest
from sabresite.build.generator import SiteGenerator
from sabresite.build.models import BuildError, BuildReport, ReproducibilityReport
from sabresite.build.writer import OutputWriter

__all__ = [
    "BuildError",
    "BuildReport",
    "OutputWriter",
    "ReproducibilityReport",
    "SiteGenerator",
    "check_reproducible",
    "compare_digests",
    "compute_digest",
]
