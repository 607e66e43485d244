from datetime import datetime

from ledger.domain import DashboardMetrics, Transaction, expense, income
from ledger.metrics import accumulate

TS = datetime(2025, 9, 1, 10, 0)


def test_cash_and_digital_scenario():
    trans = (
        income("i1", 50000, "Cash", TS),
        income("i2", 30000, "MoMo", TS),
        expense("e1", 10000, "Cash", TS),
    )
    m = accumulate(trans)
    assert m.total_revenue == 80000
    assert m.cash_revenue == 50000
    assert m.digital_revenue == 30000
    assert m.total_expenses == 10000
    assert m.available_cash == 40000
    assert m.available_digital == 30000
    assert m.revenue_count == 2
    assert m.expense_count == 1
    assert m.net_profit == 70000


def test_empty_input_is_all_zero():
    assert accumulate(()) == DashboardMetrics()


def test_every_non_cash_method_is_digital():
    methods = ("MoMo", "Airtel Money", "Bank", "Card", "Insurance", "Partner", None, "cash")
    trans = tuple(income(f"i{n}", 10, m, TS) for n, m in enumerate(methods))
    m = accumulate(trans)
    assert m.cash_revenue == 0
    assert m.digital_revenue == 80


def test_totals_are_sum_of_splits():
    trans = (
        income("i1", 1200, "Cash", TS),
        income("i2", 800, "Card", TS),
        income("i3", 0, "Cash", TS),
        expense("e1", 300, "Bank", TS),
        expense("e2", 150, "Cash", TS),
    )
    m = accumulate(trans)
    assert m.total_revenue == m.cash_revenue + m.digital_revenue
    assert m.total_expenses == m.cash_expenses + m.digital_expenses


def test_available_balances_can_go_negative():
    trans = (
        income("i1", 100, "MoMo", TS),
        expense("e1", 500, "Cash", TS),
        expense("e2", 300, "MoMo", TS),
    )
    m = accumulate(trans)
    assert m.available_cash == -500
    assert m.available_digital == -200


def test_large_totals_do_not_overflow():
    big = 2 ** 62
    m = accumulate((income("i1", big, "Cash", TS), income("i2", big, "Cash", TS)))
    assert m.total_revenue == 2 ** 63


def test_expense_patient_id_does_not_change_totals():
    odd = Transaction("e1", "Expense", 200, "Cash", TS, patient_id="p1")
    m = accumulate((odd,))
    assert m.total_expenses == 200
    assert m.total_revenue == 0


def test_negative_amount_stays_consistent():
    m = accumulate((income("i1", -100, "Cash", TS), income("i2", 300, "Cash", TS)))
    assert m.total_revenue == 200
    assert m.cash_revenue == 200
