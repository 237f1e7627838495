"""Showcase: generate single-page visual showcases for GitHub repositories."""

__version__ = "1.0.0"

__all__ = ["__version__"]
