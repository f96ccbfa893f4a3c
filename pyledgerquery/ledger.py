"""Read-only view over validated transactions."""

from collections import namedtuple

from pyledgerquery.functions import is_subaccount


class DateRange(namedtuple('DateRange', 'begin end')):
    """Span of days, `begin` included and `end` excluded.

    Either bound may be ``None`` for an open range.
    """

    __slots__ = ()

    def __new__(cls, begin=None, end=None):
        return super(DateRange, cls).__new__(cls, begin, end)

    def __contains__(self, day):
        if self.begin is not None and day < self.begin:
            return False
        if self.end is not None and day >= self.end:
            return False
        return True


ALL_DATES = DateRange()


class Ledger(object):
    """Validated transactions in chronological order.

    Transactions on the same date keep the order they were given in, which
    for a parsed journal is file order. The ledger is built once and never
    changes, load the journal again to pick up edits.

    Parameters:
        transactions (iterable): Balanced :obj:`Transaction` objects.
    """

    def __init__(self, transactions=()):
        self._transactions = tuple(
            sorted(transactions, key=lambda t: t.date)
        )
        self._accounts = frozenset(
            p.account for t in self._transactions for p in t.postings
        )

    @property
    def transactions(self):
        return self._transactions

    def __len__(self):
        return len(self._transactions)

    def __iter__(self):
        return iter(self._transactions)

    def accounts(self):
        """Every account path used by a posting."""
        return self._accounts

    def commodities(self):
        return frozenset(
            p.amount.commodity for t in self._transactions for p in t.postings
        )

    def postings(self, date_range=None):
        """Generate every posting inside `date_range`, in ledger order."""
        date_range = date_range or ALL_DATES
        for transaction in self._transactions:
            if transaction.date in date_range:
                for posting in transaction.postings:
                    yield posting

    def postings_for_account(self, prefix=None, date_range=None):
        """Postings of an account and its sub-accounts.

        Parameters:
            prefix (str): Account path. ``Assets`` matches ``Assets`` and
                ``Assets:Cash`` but not ``AssetsX``. ``None`` or an empty
                string matches every account.
            date_range (DateRange): Days to include, all by default.

        Returns:
            list: :obj:`Posting` objects, chronological with file order as
            the tie-break.
        """
        return [
            p for p in self.postings(date_range)
            if is_subaccount(p.account, prefix)
        ]
