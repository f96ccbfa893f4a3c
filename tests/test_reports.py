from datetime import date
from decimal import Decimal
import os

from pyledgerquery.errors import NoPriceDataError
from pyledgerquery.journal import Amount, PriceEntry
from pyledgerquery.ledger import DateRange
from pyledgerquery.ledger2python import import_journal, load_journal
from pyledgerquery.prices import PriceIndex
from pyledgerquery.reports import (
    ASSET, LIABILITY, balance_report, net_worth_report, register_report,
    select_postings,
)

dir = os.path.dirname(os.path.realpath(__file__))

GROCERY = """\
2024-01-05 * Grocery
    Expenses:Food  50.00 USD
    Assets:Checking
"""


def ledger_of(text):
    result = import_journal(text)
    assert result.errors == ()
    return result.ledger


class TestBalanceReport:

    def setup_method(self):
        self.ledger = load_journal(
            os.path.join(dir, 'data', 'sample.ledger')
        ).ledger

    def test_grocery_end_to_end(self):
        report = balance_report(ledger_of(GROCERY), 'Expenses')

        assert report.balances == {'Expenses:Food': {'USD': Decimal('50.00')}}
        assert report.grand_total == {'USD': Decimal('50.00')}
        assert report.totals == {
            'Expenses': {'USD': Decimal('50.00')},
            'Expenses:Food': {'USD': Decimal('50.00')},
        }

    def test_rollup_to_ancestors(self):
        report = balance_report(self.ledger, 'Expenses')

        assert report.totals['Expenses'] == {'USD': Decimal('130.00')}
        assert report.totals['Expenses:Utilities'] == {'USD': Decimal('80')}
        assert report.grand_total == {'USD': Decimal('130.00')}
        assert [(r.account, r.depth) for r in report.rows] == [
            ('Expenses', 1),
            ('Expenses:Food', 2),
            ('Expenses:Utilities', 2),
            ('Expenses:Utilities:Electric', 3),
        ]

    def test_ancestor_equals_sum_of_children(self):
        report = balance_report(self.ledger, show_empty=True)

        for account, total in report.totals.items():
            children = [
                a for a in report.totals
                if a.startswith(account + ':') and
                a.count(':') == account.count(':') + 1
            ]
            if not children:
                continue
            own = report.balances.get(account, {})
            for commodity, quantity in total.items():
                expected = own.get(commodity, Decimal(0)) + sum(
                    report.totals[c].get(commodity, Decimal(0))
                    for c in children
                )
                assert quantity == expected

    def test_grand_total_counts_each_posting_once(self):
        report = balance_report(self.ledger, ['Assets', 'Liabilities'])

        assert report.grand_total == {
            'USD': Decimal('2650.00'),
            'AAPL': Decimal('10'),
            'EUR': Decimal('200.00'),
        }
        assert report.totals['Assets']['USD'] == Decimal('2730.00')

    def test_zero_accounts_pruned(self):
        report = balance_report(self.ledger, 'Equity')

        assert 'Equity:Conversion' not in report.totals
        assert 'Equity:Conversion' not in report.balances
        assert report.totals['Equity:Opening Balances'] == {
            'USD': Decimal('-1000.00'), 'AAPL': Decimal('-10'),
        }

    def test_show_empty(self):
        report = balance_report(self.ledger, 'Equity', show_empty=True)

        assert report.totals['Equity:Conversion'] == {
            'USD': Decimal('0'), 'EUR': Decimal('0'),
        }

    def test_whole_ledger_nets_to_zero(self):
        report = balance_report(self.ledger)
        assert report.grand_total == {}

    def test_pattern_filter(self):
        report = balance_report(self.ledger, pattern='check')
        assert list(report.balances) == ['Assets:Checking']

    def test_date_range(self):
        report = balance_report(
            self.ledger, 'Assets:Checking',
            DateRange(date(2024, 1, 2), date(2024, 1, 15))
        )
        assert report.grand_total == {'USD': Decimal('-50.00')}

    def test_ancestor_that_nets_to_zero(self):
        report = balance_report(ledger_of(
            '2024-01-05 Move\n'
            '    Assets:Savings  5.00 USD\n'
            '    Assets:Checking\n'
        ))

        assert report.totals['Assets'] == {}
        assert report.totals['Assets:Savings'] == {'USD': Decimal('5.00')}
        assert report.grand_total == {}

    def test_depth(self):
        report = balance_report(self.ledger, 'Expenses', depth=2)

        assert set(report.totals) == set([
            'Expenses', 'Expenses:Food', 'Expenses:Utilities'
        ])
        assert report.balances['Expenses:Utilities'] == {'USD': Decimal('80')}


class TestRegisterReport:

    def setup_method(self):
        self.ledger = load_journal(
            os.path.join(dir, 'data', 'sample.ledger')
        ).ledger

    def test_running_balance_is_prefix_sum(self):
        report = register_report(self.ledger, 'Assets:Checking')

        amounts = [r.amount.quantity for r in report.rows]
        running = [r.running_total.quantity for r in report.rows]
        assert amounts == [
            Decimal('1000.00'), Decimal('-50.00'), Decimal('2000.00'),
            Decimal('-220.00'),
        ]
        assert running == [
            Decimal('1000.00'), Decimal('950.00'), Decimal('2950.00'),
            Decimal('2730.00'),
        ]
        assert report.balance == {'USD': Decimal('2730.00')}

    def test_row_fields(self):
        row = register_report(self.ledger, 'Expenses:Food').rows[0]

        assert row.date == date(2024, 1, 5)
        assert row.description == 'Grocery'
        assert row.account == 'Expenses:Food'
        assert row.amount == Amount('50.00', 'USD')
        assert row.line == 10

    def test_running_sums_kept_per_commodity(self):
        report = register_report(self.ledger, 'Assets')

        previous = {}
        for row in report.rows:
            commodity = row.amount.commodity
            expected = previous.get(commodity, Decimal(0)) + \
                row.amount.quantity
            assert row.running_total == Amount(expected, commodity)
            assert row.running_balance[commodity] == expected
            previous = row.running_balance

        assert report.balance == {
            'USD': Decimal('2730.00'),
            'AAPL': Decimal('10'),
            'EUR': Decimal('200.00'),
        }

    def test_scoped_to_filter(self):
        report = register_report(
            self.ledger, 'Assets:Checking',
            DateRange(begin=date(2024, 1, 10))
        )

        assert [r.running_total.quantity for r in report.rows] == [
            Decimal('2000.00'), Decimal('1780.00')
        ]
        assert set(r.account for r in report.rows) == set(['Assets:Checking'])

    def test_empty(self):
        report = register_report(self.ledger, 'Nothing')
        assert report.rows == ()
        assert report.balance == {}


class TestNetWorthReport:

    def setup_method(self):
        self.ledger = load_journal(
            os.path.join(dir, 'data', 'sample.ledger')
        ).ledger
        self.prices = PriceIndex([
            PriceEntry(date(2024, 1, 10), 'AAPL', Amount('186.00', 'USD')),
            PriceEntry(date(2024, 1, 20), 'EUR', Amount('1.10', 'USD')),
        ])

    def test_single_commodity_end_to_end(self):
        ledger = ledger_of(
            '2024-01-01 Opening\n'
            '    Assets:Checking  1000.00 USD\n'
            '    Assets:Savings  500.00 USD\n'
            '    Equity:Opening\n'
            '\n' + GROCERY +
            '\n'
            '2024-01-05 Card\n'
            '    Expenses:Fuel  40.00 USD\n'
            '    Liabilities:Card\n'
            '\n'
            '2024-01-06 Later\n'
            '    Expenses:Fuel  10.00 USD\n'
            '    Liabilities:Card\n'
        )
        report = net_worth_report(ledger, PriceIndex(), date(2024, 1, 5), 'USD')

        assert report.assets == Decimal('1450.00')
        assert report.liabilities == Decimal('40.00')
        assert report.net_worth == report.assets - report.liabilities
        assert report.net_worth == Decimal('1410.00')
        assert not report.partial

    def test_converted(self):
        report = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 31), 'USD'
        )

        assert report.assets == Decimal('4810.00')
        assert report.liabilities == Decimal('80.00')
        assert report.net_worth == Decimal('4730.00')
        assert not report.partial

        lines = dict(
            ((x.account, x.balance.commodity), x) for x in report.lines
        )
        assert lines[('Assets:Wallet', 'EUR')].value == Amount('220', 'USD')
        assert lines[('Assets:Brokerage', 'AAPL')].kind == ASSET
        assert lines[('Liabilities:CreditCard', 'USD')].kind == LIABILITY

    def test_missing_price_makes_report_partial(self):
        prices = PriceIndex([
            PriceEntry(date(2024, 1, 10), 'AAPL', Amount('186.00', 'USD')),
        ])
        report = net_worth_report(self.ledger, prices, date(2024, 1, 31), 'USD')

        assert report.partial
        assert report.assets == Decimal('4590.00')
        assert len(report.unconverted) == 1

        missing = report.unconverted[0]
        assert missing.account == 'Assets:Wallet'
        assert missing.balance == Amount('200.00', 'EUR')
        assert isinstance(missing.error, NoPriceDataError)

    def test_price_must_not_be_later_than_report_date(self):
        report = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 20), 'USD'
        )
        assert not report.partial

        report = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 9), 'USD'
        )
        assert report.partial
        assert [u.account for u in report.unconverted] == ['Assets:Brokerage']
        assert report.assets == Decimal('950.00')

    def test_latest_possible_date(self):
        report = net_worth_report(self.ledger, self.prices, date.max, 'USD')

        assert report.net_worth == Decimal('4730.00')
        assert not report.partial

    def test_configurable_classification(self):
        report = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 31), 'USD',
            assets=('Assets', 'Expenses'), liabilities=()
        )
        assert report.liabilities == Decimal(0)
        assert report.assets == Decimal('4940.00')

    def test_independent_price_snapshots(self):
        other = PriceIndex([
            PriceEntry(date(2024, 1, 1), 'AAPL', Amount('100', 'USD')),
            PriceEntry(date(2024, 1, 1), 'EUR', Amount('1', 'USD')),
        ])
        first = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 31), 'USD'
        )
        second = net_worth_report(self.ledger, other, date(2024, 1, 31), 'USD')
        again = net_worth_report(
            self.ledger, self.prices, date(2024, 1, 31), 'USD'
        )

        assert second.assets == Decimal('3930.00')
        assert first == again


class TestSelectPostings:

    def test_several_prefixes(self):
        ledger = ledger_of(GROCERY)
        postings = select_postings(ledger, ['Expenses', 'Assets'])
        assert len(postings) == 2
