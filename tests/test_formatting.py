from decimal import Decimal

from paycheck_planner.formatting import escape_dollar_for_markdown, format_currency, format_percent


def test_format_currency():
    assert format_currency(Decimal('1234.5')) == '$1,234.50'
    assert format_currency(1234.56, include_sign=False) == '1,234.56'
    assert format_currency(Decimal('-12.5')) == '-$12.50'
    assert format_currency(0) == '$0.00'


def test_escape_dollar_for_markdown():
    assert escape_dollar_for_markdown(Decimal('800')) == '\\$800.00'


def test_format_percent():
    assert format_percent(42.4) == '42%'
    assert format_percent(100.0) == '100%'
