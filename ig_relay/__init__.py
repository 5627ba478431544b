"""Instagram direct-message webhook relay."""

__version__ = "0.1.0"
