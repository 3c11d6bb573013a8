def format_currency(amount: float, symbol: str = "R$") -> str:
    """Format a float in pt-BR style, e.g. 'R$ 1.234,56'."""
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {body}"


def format_signed(amount: float, symbol: str = "R$") -> str:
    """Format with +/- sign."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{format_currency(abs(amount), symbol)}"


def format_plain_number(amount: float) -> str:
    """Shortest round-trip rendering: 100.0 -> '100', 12.5 -> '12.5'."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))
