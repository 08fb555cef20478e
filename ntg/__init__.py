"""Multi-touch tracking and incremental pinch / rotate / pan transform recovery."""

__version__ = "0.1.0"
