"""extrel: release automation for a self-hosted browser extension."""

__version__ = "0.3.0"
