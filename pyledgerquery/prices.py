"""Commodity price history."""

from bisect import bisect_right
import logging

from pyledgerquery.errors import LexError, NoPriceDataError, ParseError
from pyledgerquery.journal import Amount, PriceEntry
from pyledgerquery.parser import parse_journal
from pyledgerquery.strings import Messages

logger = logging.getLogger(__name__)


class PriceIndex(object):
    """Per commodity pair price series.

    Rates are only looked up in the direction they were recorded, a
    ``P DATE EUR 1.10 USD`` entry prices EUR in USD and says nothing about
    USD in EUR. When a pair has several entries on the same date the one
    that came last in `entries` is kept.

    Parameters:
        entries (iterable): :obj:`PriceEntry` objects in parse order.
    """

    def __init__(self, entries=()):
        by_pair = {}
        for entry in entries:
            series = by_pair.setdefault((entry.source, entry.target), {})
            if entry.date in series:
                logger.debug(Messages.duplicate_price.format(
                    entry.source, entry.target, entry.date.isoformat()
                ))
            series[entry.date] = entry

        self._series = {}
        self._dates = {}
        for pair, series in by_pair.items():
            ordered = tuple(series[d] for d in sorted(series))
            self._series[pair] = ordered
            self._dates[pair] = tuple(e.date for e in ordered)

    def __len__(self):
        return sum(len(s) for s in self._series.values())

    def pairs(self):
        """Set of ``(source, target)`` commodity pairs with prices."""
        return frozenset(self._series)

    def series(self, source, target):
        """All entries for a pair, oldest first."""
        return self._series.get((source, target), ())

    def price_as_of(self, source, target, date):
        """Latest price for a pair on or before `date`.

        Parameters:
            source (str): Commodity being priced.
            target (str): Commodity the price is expressed in.
            date (date): Day of the lookup.

        Returns:
            PriceEntry: Entry with the greatest date not after `date`.

        Raises:
            NoPriceDataError: If the pair has no entry on or before `date`.
        """
        dates = self._dates.get((source, target), ())
        idx = bisect_right(dates, date)
        if idx == 0:
            raise NoPriceDataError(source, target, date)

        return self._series[(source, target)][idx - 1]

    def convert(self, amount, target, date):
        """Value `amount` in the `target` commodity as of `date`.

        Returns:
            Amount: `amount` unchanged when it is already in `target`.

        Raises:
            NoPriceDataError: If no usable rate exists.
        """
        if amount.commodity == target:
            return amount

        entry = self.price_as_of(amount.commodity, target, date)
        price = entry.price
        return Amount(amount.quantity * price.quantity, target,
                      price.format, price.quoted)


def parse_price_db(text):
    """Read price directives from a price database.

    Every line is an independent ``P DATE [TIME] COMMODITY AMOUNT`` entry,
    a bad line is reported and the rest are still read.

    Parameters:
        text (str): Price database contents.

    Returns:
        tuple: ``(entries, errors)``, the :obj:`PriceEntry` objects in file
        order and a list of :obj:`LexError` / :obj:`ParseError`.
    """
    entries = []
    errors = []
    for item in parse_journal(text):
        if isinstance(item, PriceEntry):
            entries.append(item)
        elif isinstance(item, (LexError, ParseError)):
            errors.append(item)
        else:
            errors.append(ParseError(
                'Only price entries are allowed in a price database',
                item.line, expected='price entry', found='transaction'
            ))

    return entries, errors
