"""Convert ledger formatted plain text to python data structures."""

from collections import namedtuple
import io
import logging

from pyledgerquery.balance import validate
from pyledgerquery.errors import LedgerError, LoadErrors
from pyledgerquery.journal import PriceEntry, Transaction
from pyledgerquery.ledger import Ledger
from pyledgerquery.lexer import lines
from pyledgerquery.parser import parse_journal
from pyledgerquery.prices import PriceIndex, parse_price_db
from pyledgerquery.strings import Messages

logger = logging.getLogger(__name__)


class JournalResult(namedtuple('JournalResult', 'ledger prices errors')):
    """Outcome of loading a journal.

    Attributes:
        ledger (Ledger): Every transaction that parsed and balanced.
        prices (tuple): :obj:`PriceEntry` objects found in the journal.
        errors (tuple): One :obj:`LedgerError` per rejected entry, in
            source order.
    """

    __slots__ = ()

    def raise_for_errors(self):
        """Raise :obj:`LoadErrors` if any entry was rejected."""
        if self.errors:
            raise LoadErrors(self.errors)
        return self


class PriceResult(namedtuple('PriceResult', 'index errors')):
    """Outcome of loading a price database."""

    __slots__ = ()

    def raise_for_errors(self):
        if self.errors:
            raise LoadErrors(self.errors)
        return self


def _read(path):
    with io.open(path, 'r', encoding='utf-8') as infile:
        return infile.read()


def import_journal(journal_string):
    """Main entry point for parsing ledger plaintext into python.

    Each entry is lexed, parsed and balanced on its own. Entries that fail
    are left out of the ledger and their errors collected, so one typo
    does not hide the rest of the journal.

    Parameters:
        journal_string (str): Journal text.

    Returns:
        JournalResult: Ledger, prices and the collected errors.
    """
    parsed = []
    prices = []
    errors = []

    for item in parse_journal(journal_string):
        if isinstance(item, LedgerError):
            errors.append(item)
        elif isinstance(item, PriceEntry):
            prices.append(item)
        elif isinstance(item, Transaction):
            parsed.append(item)

    valid, balance_errors = validate(parsed)
    errors.extend(balance_errors)
    errors.sort(key=lambda e: e.line or 0)

    for error in errors:
        logger.warning(Messages.diagnostic.format(error))

    logger.info(Messages.loaded.format(
        len(valid), len(prices), len(lines(journal_string))
    ))

    return JournalResult(Ledger(valid), tuple(prices), tuple(errors))


def load_journal(path):
    """Read and import a UTF-8 journal file."""
    return import_journal(_read(path))


def import_prices(price_string, extra=()):
    """Build a :obj:`PriceIndex` from price database text.

    Parameters:
        price_string (str): Price database contents.
        extra (iterable): More :obj:`PriceEntry` objects, such as the
            prices of a :obj:`JournalResult`. They are applied after the
            database entries.

    Returns:
        PriceResult: The index and the errors of rejected lines.
    """
    entries, errors = parse_price_db(price_string)

    for error in errors:
        logger.warning(Messages.diagnostic.format(error))

    return PriceResult(PriceIndex(entries + list(extra)), tuple(errors))


def load_prices(path, extra=()):
    """Read and import a UTF-8 price database file."""
    return import_prices(_read(path), extra)
