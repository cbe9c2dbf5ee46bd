"""Magic Mirror: smart mirror display backend and admin API."""

__version__ = "0.1.0"
