USD = "USD"
PKR = "PKR"
SUPPORTED_CURRENCIES = (USD, PKR)
DEFAULT_CURRENCY = PKR

USD_TO_PKR_RATE = 280


def format_price(amount: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Display string for a USD amount in the selected currency.

    >>> format_price(100, "PKR")
    'Rs 28,000'
    >>> format_price(1234.5, "USD")
    '$1,234.50'
    """
    if currency == PKR:
        return f"Rs {round(amount * USD_TO_PKR_RATE):,}"
    if currency == USD:
        return f"${amount:,.2f}"
    raise ValueError(f"Unsupported currency: {currency}")
