"""docnav - navigation trees for Markdown documentation sites."""

__version__ = "0.1.0"
