"""Useful functions."""

from decimal import Decimal, InvalidOperation
import re

NUMBER_REGEX = re.compile(r'^-?(\d{1,3}(,\d{3})+|\d+)(\.\d+)?$')


def parse_quantity(text):
    """Convert a numeric literal into a :obj:`Decimal`.

    Thousands separators are accepted when they group exactly three digits.

    Parameters:
        text (str): Literal such as ``-1,110.38`` or ``24521.793``.

    Returns:
        Decimal: The value, or ``None`` when `text` is not a valid literal.

    >>> parse_quantity('2,314')
    Decimal('2314')
    """
    if not NUMBER_REGEX.match(text):
        return None

    try:
        return Decimal(text.replace(',', ''))
    except InvalidOperation:
        return None


def split_account(account):
    return account.split(':')


def valid_account(account):
    """Return True if every colon separated segment is non-empty."""
    if not account or account != account.strip():
        return False

    return all(x.strip() == x and x != '' for x in split_account(account))


def account_parents(account):
    """List the ancestors of an account, nearest last.

    >>> account_parents('Expenses:Food:Groceries')
    ['Expenses', 'Expenses:Food']
    """
    segments = split_account(account)
    return [':'.join(segments[:i]) for i in range(1, len(segments))]


def account_depth(account):
    return len(split_account(account))


def is_subaccount(account, prefix):
    """Return True if `account` equals `prefix` or is below it.

    ``Assets:Cash`` is below ``Assets`` but ``AssetsX`` is not.
    """
    if not prefix:
        return True

    return account == prefix or account.startswith(prefix + ':')


def add_quantity(totals, commodity, quantity):
    """Accumulate `quantity` of `commodity` into the `totals` dict."""
    totals[commodity] = totals.get(commodity, Decimal(0)) + quantity
    return totals


def nonzero(totals):
    """Copy of `totals` without the commodities that sum to zero."""
    return dict((k, v) for k, v in totals.items() if v != 0)
