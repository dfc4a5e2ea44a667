"""HTTP JSON API over SQLite for space simulation commodities and solar systems."""

__version__ = "0.1.0"