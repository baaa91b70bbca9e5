"""Client library for the Maps Web Service APIs: directions and distance matrix."""

__version__ = "0.1.0"