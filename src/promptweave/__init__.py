"""promptweave: graph-to-request prompt assembly for image generation boards."""

__version__ = "0.3.0"
