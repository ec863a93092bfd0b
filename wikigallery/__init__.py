"""Download full-resolution images from wiki category listings."""

__version__ = "0.1.0"
