from finance_insights.formatting import format_currency


def test_format_currency_with_cents():
    assert format_currency(244800) == '$2,448.00'
    assert format_currency(5) == '$0.05'


def test_format_currency_without_cents_or_sign():
    assert format_currency(20000, show_cents=False) == '$200'
    assert format_currency(244820, show_cents=False, include_sign=False) == '2,448'
