"""Market pulse refresh for the AI skills dashboard snapshot."""

__version__ = "0.1.0"
