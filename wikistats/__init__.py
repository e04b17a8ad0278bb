"""Wikipedia statistics extraction and redirect resolution."""

__version__ = "0.1.0"
