"""Import SUDS dialogue scripts into dialogue node graphs with string tables."""

__version__ = "0.1.0"