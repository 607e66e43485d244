from typing import Iterable

from ledger.domain import DashboardMetrics, Transaction


def accumulate(trans: Iterable[Transaction]) -> DashboardMetrics:
    """Reduce a window's records into dashboard totals in one pass.

    Records are expected to be filtered to the window already. Exact ``Cash``
    is cash; any other payment method, missing included, counts as digital.
    """
    revenue = revenue_count = cash_revenue = digital_revenue = 0
    expenses = expense_count = cash_expenses = digital_expenses = 0

    for t in trans:
        if t.is_income:
            revenue += t.amount
            revenue_count += 1
            if t.is_cash:
                cash_revenue += t.amount
            else:
                digital_revenue += t.amount
        elif t.is_expense:
            expenses += t.amount
            expense_count += 1
            if t.is_cash:
                cash_expenses += t.amount
            else:
                digital_expenses += t.amount

    return DashboardMetrics(
        total_revenue=revenue,
        revenue_count=revenue_count,
        cash_revenue=cash_revenue,
        digital_revenue=digital_revenue,
        total_expenses=expenses,
        expense_count=expense_count,
        cash_expenses=cash_expenses,
        digital_expenses=digital_expenses,
        available_cash=cash_revenue - cash_expenses,
        available_digital=digital_revenue - digital_expenses,
        net_profit=revenue - expenses,
    )
