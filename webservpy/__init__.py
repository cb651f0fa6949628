"""An nginx-style HTTP server driven by a .conf configuration file."""

__version__ = "0.1.0"