"""
Symbol list for offline search.

US stocks, ETFs and indices with metadata for search/autocomplete when no
live data source is configured.
"""

from typing import Optional

from stockchart.schemas.market import SymbolSearchResult, SymbolType

# Tickers the mock generator has full price data for
SUPPORTED_SYMBOLS = ("AAPL", "MSFT", "GOOGL", "AMZN", "TSLA")

SYMBOL_DATABASE = [
    # Full mock data
    {"symbol": "AAPL", "name": "Apple Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "MSFT", "name": "Microsoft Corporation", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "GOOGL", "name": "Alphabet Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "AMZN", "name": "Amazon.com, Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "TSLA", "name": "Tesla, Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    # Search only
    {"symbol": "META", "name": "Meta Platforms, Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "NVDA", "name": "NVIDIA Corporation", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "AMD", "name": "Advanced Micro Devices, Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "NFLX", "name": "Netflix, Inc.", "type": SymbolType.STOCK, "exchange": "NASDAQ"},
    {"symbol": "JPM", "name": "JPMorgan Chase & Co.", "type": SymbolType.STOCK, "exchange": "NYSE"},
    {"symbol": "V", "name": "Visa Inc.", "type": SymbolType.STOCK, "exchange": "NYSE"},
    {"symbol": "JNJ", "name": "Johnson & Johnson", "type": SymbolType.STOCK, "exchange": "NYSE"},
    {"symbol": "WMT", "name": "Walmart Inc.", "type": SymbolType.STOCK, "exchange": "NYSE"},
    {"symbol": "PG", "name": "The Procter & Gamble Company", "type": SymbolType.STOCK, "exchange": "NYSE"},
    {"symbol": "DIS", "name": "The Walt Disney Company", "type": SymbolType.STOCK, "exchange": "NYSE"},
    # ETFs
    {"symbol": "SPY", "name": "SPDR S&P 500 ETF Trust", "type": SymbolType.ETF, "exchange": "NYSE"},
    {"symbol": "QQQ", "name": "Invesco QQQ Trust", "type": SymbolType.ETF, "exchange": "NASDAQ"},
    {"symbol": "IWM", "name": "iShares Russell 2000 ETF", "type": SymbolType.ETF, "exchange": "NYSE"},
    {"symbol": "VTI", "name": "Vanguard Total Stock Market ETF", "type": SymbolType.ETF, "exchange": "NYSE"},
    # Indices
    {"symbol": "^GSPC", "name": "S&P 500", "type": SymbolType.INDEX, "exchange": "INDEX"},
    {"symbol": "^DJI", "name": "Dow Jones Industrial Average", "type": SymbolType.INDEX, "exchange": "INDEX"},
    {"symbol": "^IXIC", "name": "NASDAQ Composite", "type": SymbolType.INDEX, "exchange": "INDEX"},
]


def is_supported_symbol(symbol: str) -> bool:
    return symbol.upper() in SUPPORTED_SYMBOLS


def _to_result(stock: dict) -> SymbolSearchResult:
    return SymbolSearchResult(
        symbol=stock["symbol"],
        name=stock["name"],
        type=stock["type"],
        exchange=stock["exchange"],
        currency="USD",
    )


def _score(stock: dict, query: str) -> int:
    symbol = stock["symbol"].lower()
    name = stock["name"].lower()

    if symbol == query:
        score = 100
    elif symbol.startswith(query):
        score = 80
    elif query in symbol:
        score = 60
    elif name.startswith(query):
        score = 50
    elif query in name:
        score = 40
    elif any(word.startswith(query) for word in name.split()):
        score = 30
    else:
        return 0

    if is_supported_symbol(stock["symbol"]):
        score += 10
    return score


def search_symbols(query: str, limit: int = 10) -> list[SymbolSearchResult]:
    """
    Search symbols by ticker or company name.

    Args:
        query: Search query (case-insensitive, partial match)
        limit: Maximum results to return

    Returns:
        Matches ordered by relevance: exact ticker, ticker prefix, ticker
        substring, name prefix, name substring, then word prefix. Tickers
        with full mock data rank above equal matches.
    """
    query = (query or "").lower().strip()
    if not query:
        return []

    scored = [(stock, _score(stock, query)) for stock in SYMBOL_DATABASE]
    matches = [(stock, score) for stock, score in scored if score > 0]
    matches.sort(key=lambda item: item[1], reverse=True)

    return [_to_result(stock) for stock, _ in matches[:limit]]


def get_all_symbols() -> list[SymbolSearchResult]:
    return [_to_result(stock) for stock in SYMBOL_DATABASE]


def get_symbol_details(symbol: str) -> Optional[SymbolSearchResult]:
    """Database entry for a ticker, if present."""
    for stock in SYMBOL_DATABASE:
        if stock["symbol"].lower() == symbol.lower():
            return _to_result(stock)
    return None
