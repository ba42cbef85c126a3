"""side-code-export: export recorded browser tests to source code."""

__version__ = "0.1.0"
