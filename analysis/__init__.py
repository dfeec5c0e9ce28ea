"""Token analysis: volatility, metrics normalisation and profitability checks."""
