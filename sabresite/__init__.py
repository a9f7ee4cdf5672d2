"""sabresite — build, check and preview the sabre.io documentation site."""

__version__ = "0.1.0"
