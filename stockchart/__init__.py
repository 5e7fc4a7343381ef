"""
StockChart data core

Market data access (Alpha Vantage, Finnhub, deterministic mock), a rate
limited and cached request pipeline, and a NumPy technical indicator library.
"""

__version__ = "0.1.0"
