from datetime import date
from decimal import Decimal
import os

import pytest

from pyledgerquery.errors import LexError, NoPriceDataError, ParseError
from pyledgerquery.journal import Amount, PriceEntry
from pyledgerquery.prices import PriceIndex, parse_price_db

dir = os.path.dirname(os.path.realpath(__file__))


def entry(day, source, quantity, target):
    return PriceEntry(day, source, Amount(quantity, target))


class TestPriceAsOf:

    def setup_method(self):
        self.index = PriceIndex([
            entry(date(2024, 1, 10), 'AAPL', '185', 'USD'),
            entry(date(2024, 1, 1), 'AAPL', '180', 'USD'),
            entry(date(2024, 2, 1), 'AAPL', '190', 'USD'),
            entry(date(2024, 1, 3), 'EUR', '1.05', 'USD'),
        ])

    @pytest.mark.parametrize('day, expected', [
        (date(2024, 1, 1), '180'),
        (date(2024, 1, 9), '180'),
        (date(2024, 1, 10), '185'),
        (date(2024, 1, 31), '185'),
        (date(2030, 1, 1), '190'),
    ])
    def test_latest_entry_not_after_date(self, day, expected):
        found = self.index.price_as_of('AAPL', 'USD', day)
        assert found.price == Amount(expected, 'USD')
        assert found.date <= day

    def test_before_first_entry(self):
        with pytest.raises(NoPriceDataError) as info:
            self.index.price_as_of('AAPL', 'USD', date(2023, 12, 31))

        assert info.value.source == 'AAPL'
        assert info.value.target == 'USD'
        assert '2023-12-31' in str(info.value)

    def test_unknown_pair(self):
        with pytest.raises(NoPriceDataError):
            self.index.price_as_of('BTC', 'USD', date(2024, 1, 31))

    def test_no_reciprocal_rate(self):
        with pytest.raises(NoPriceDataError):
            self.index.price_as_of('USD', 'EUR', date(2024, 1, 31))

    def test_missing_price_is_a_lookup_error(self):
        with pytest.raises(LookupError):
            self.index.price_as_of('USD', 'EUR', date(2024, 1, 31))

    def test_series_sorted(self):
        dates = [e.date for e in self.index.series('AAPL', 'USD')]
        assert dates == sorted(dates)
        assert len(self.index) == 4
        assert self.index.pairs() == frozenset(
            [('AAPL', 'USD'), ('EUR', 'USD')]
        )

    def test_convert(self):
        value = self.index.convert(
            Amount('200', 'EUR'), 'USD', date(2024, 1, 5)
        )
        assert value == Amount(Decimal('210'), 'USD')

    def test_convert_same_commodity(self):
        amount = Amount('5', 'USD')
        assert self.index.convert(amount, 'USD', date(2000, 1, 1)) is amount


class TestDuplicates:

    def test_last_entry_wins(self):
        index = PriceIndex([
            entry(date(2024, 1, 10), 'AAPL', '185', 'USD'),
            entry(date(2024, 1, 10), 'AAPL', '186', 'USD'),
        ])

        assert len(index) == 1
        found = index.price_as_of('AAPL', 'USD', date(2024, 1, 10))
        assert found.price.quantity == Decimal('186')


class TestParsePriceDB:

    def setup_method(self):
        with open(os.path.join(dir, 'data', 'prices.db')) as p_file:
            self.entries, self.errors = parse_price_db(p_file.read())

    def test_entries(self):
        assert len(self.entries) == 6
        assert self.errors == []
        assert self.entries[-1] == PriceEntry(
            date(2015, 10, 25), 'MUTF2351', Amount('5.42', '$'), 6
        )

    def test_time_of_day_is_ignored(self):
        index = PriceIndex(self.entries)
        found = index.price_as_of('AAPL', 'USD', date(2024, 1, 10))

        assert found.price == Amount('186.00', 'USD')
        assert found.line == 3

    def test_bad_lines_are_reported(self):
        text = '\n'.join([
            'P 2024-01-01 AAPL 180.00 USD',
            'P 2024-01-02 AAPL 1.8.0 USD',
            'P 2024-01-03 AAPL',
            '2024-01-04 Not a price',
            '    Assets:A  1 USD',
            '    Assets:B',
            'P 2024-01-05 AAPL 181.00 USD',
        ])
        entries, errors = parse_price_db(text)

        assert [e.line for e in entries] == [1, 7]
        assert [type(e) for e in errors] == [LexError, ParseError, ParseError]
        assert [e.line for e in errors] == [2, 3, 4]
