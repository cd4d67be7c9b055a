"""I'M GOING INN contest backend."""

__version__ = "1.0.0"
