"""Procedural terrain flythrough built from fractal simplex noise."""

__version__ = "0.1.0"