"""seedwise: cross-seed eligibility filtering and Deluge injection."""

__version__ = "0.1.0"
