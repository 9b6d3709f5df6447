"""tokentax - in-memory token taxonomy artifact repository."""

__version__ = "0.1.0"
