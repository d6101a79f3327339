"""Quote book: random quotes, saved favourites, and speech."""

__version__ = "0.1.0"
