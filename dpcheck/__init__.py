"""dpcheck - browser end-to-end verification of a data-plane dashboard."""

__version__ = "0.1.0"
