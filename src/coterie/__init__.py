"""coterie — embedded graph store, auto-layout and fuzzy matching for industry maps."""

__version__ = "0.3.0"
