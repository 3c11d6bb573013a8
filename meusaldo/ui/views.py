"""Console renderings of the dashboard, monthly report and transaction lists."""
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from meusaldo.models.transaction import Transaction
from meusaldo.utils.constants import CREDIT
from meusaldo.utils.currency import format_currency, format_signed
from meusaldo.utils.date_helpers import format_display_date, friendly_month


def _amount_cell(tx: Transaction) -> str:
    if tx.type == CREDIT:
        return f"[green]{format_signed(tx.amount)}[/green]"
    return f"[red]{format_signed(-tx.amount)}[/red]"


def _date_cell(tx: Transaction) -> str:
    if tx.due_date:
        return f"Venc. {format_display_date(tx.due_date)}"
    return format_display_date(tx.date)


def transactions_table(transactions: list[Transaction], title: str = "") -> Table:
    table = Table(title=title or None, show_lines=False)
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Paid", justify="center")
    for tx in transactions:
        table.add_row(
            tx.id or "",
            _date_cell(tx),
            escape(tx.description or ""),
            _amount_cell(tx),
            "✓" if tx.is_paid else "",
        )
    return table


def render_dashboard(console: Console, data: dict, year: int, month: int):
    console.print(f"[bold]{friendly_month(year, month)}[/bold]")
    console.print(f"Balance:  {format_currency(data['balance'])}")
    console.print(f"Income:   [green]{format_currency(data['income'])}[/green]")
    console.print(f"Expenses: [red]{format_currency(data['expense'])}[/red]")
    if data["recent"]:
        console.print(transactions_table(data["recent"], title="Recent transactions"))
    else:
        console.print("[dim]No recent transactions.[/dim]")


def render_report(console: Console, report: dict, year: int, month: int):
    console.print(f"[bold]Report · {friendly_month(year, month)}[/bold]")
    console.print(f"Income:   [green]{format_currency(report['income'])}[/green]")
    console.print(f"Expenses: [red]{format_currency(report['expense'])}[/red]")
    net_style = "green" if report["net"] >= 0 else "red"
    console.print(f"Net:      [{net_style}]{format_currency(report['net'])}[/{net_style}]")

    if report["by_category"]:
        table = Table(title="Expenses by category")
        table.add_column("Category")
        table.add_column("Total", justify="right")
        for label, total in sorted(report["by_category"], key=lambda p: p[1], reverse=True):
            table.add_row(escape(label), format_currency(total))
        console.print(table)

    if report["transactions"]:
        console.print(transactions_table(report["transactions"], title="Transactions"))
    else:
        console.print("[dim]No transactions this month.[/dim]")
