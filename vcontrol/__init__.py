"""Read and write heating controller values over an Optolink serial or TCP connection."""

__version__ = "0.1.0"