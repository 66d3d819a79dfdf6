"""Documentation coverage measurement for Python codebases."""

__version__ = "0.1.0"
