"""Global Styles API - theme-level design settings and custom CSS over REST."""

__version__ = "0.1.0"
