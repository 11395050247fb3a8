"""PLN price formatting."""


def format_pln(amount: int | float) -> str:
    """Return e.g. "49.99 zł"; whole amounts drop the grosze ("50 zł")."""
    value = round(float(amount), 2)
    if value.is_integer():
        return f"{int(value)} zł"
    return f"{value:.2f} zł"
