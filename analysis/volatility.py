# volatility.py
import math
from typing import Sequence


def calculate_returns(prices: Sequence[float]) -> list[float]:
    """Simple period-over-period returns. Steps from a zero price are skipped."""
    returns = []
    for i in range(1, len(prices)):
        previous = prices[i - 1]
        if previous == 0:
            continue
        returns.append((prices[i] - previous) / previous)
    return returns


def calculate_volatility(prices: Sequence[float]) -> float:
    """
    Calculates volatility as the population standard deviation of simple returns.

    Args:
        prices: Ordered price history, oldest first.

    Returns:
        The standard deviation of the return series (divided by N, not N-1),
        or 0.0 when fewer than two prices are available.
    """
    if not prices or len(prices) < 2:
        return 0.0

    returns = calculate_returns(prices)
    if not returns:
        return 0.0

    mean = sum(returns) / len(returns)
    deviations = [value - mean for value in returns]
    # Float ** raises on overflow; multiplication saturates to inf.
    variance = sum(d * d for d in deviations) / len(deviations)
    return math.sqrt(variance)
