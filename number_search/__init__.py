"""Number Search - lead lookup console backend for Forager and Aviato."""

__version__ = "1.0.0"
