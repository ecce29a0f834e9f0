"""macrodash: US macroeconomic indicators normalized from FRED, BEA, BLS and the World Bank."""

__version__ = "0.1.0"
