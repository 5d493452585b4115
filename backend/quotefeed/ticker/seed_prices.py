"""Seed quotes for the offline quoter."""

# Realistic starting bid/ask for the default watchlist (as of project creation)
SEED_QUOTES: dict[str, tuple[float, float]] = {
    "AAPL": (189.98, 190.02),
    "GOOGL": (174.97, 175.03),
    "MSFT": (419.95, 420.05),
    "AMZN": (184.97, 185.03),
    "TSLA": (249.90, 250.10),  # Wide spread
    "NVDA": (799.80, 800.20),  # Wide spread
    "META": (499.94, 500.06),
    "JPM": (194.98, 195.02),
    "V": (279.97, 280.03),
    "NFLX": (599.90, 600.10),
}

# Displayed size on each side of a seed quote
DEFAULT_SIZE = 100
