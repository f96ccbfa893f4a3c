"""Balance, register and net worth queries.

Every query takes the ledger (and for net worth the price index) as an
argument and returns plain namedtuples and dicts. Balances are dicts of
commodity symbol to :obj:`Decimal`. Account trees are built from the
flat posting list on each call and thrown away afterwards.
"""

from collections import namedtuple
from datetime import timedelta
from decimal import Decimal
import logging
import re

from pyledgerquery.errors import NoPriceDataError
from pyledgerquery.functions import (
    account_depth, account_parents, add_quantity, is_subaccount, nonzero,
    split_account,
)
from pyledgerquery.journal import Amount
from pyledgerquery.ledger import DateRange
from pyledgerquery.prices import PriceIndex
from pyledgerquery.strings import Messages

logger = logging.getLogger(__name__)

ASSET = 'asset'
LIABILITY = 'liability'

BalanceRow = namedtuple('BalanceRow', 'account depth balance')
BalanceReport = namedtuple(
    'BalanceReport', 'balances totals rows grand_total'
)

RegisterRow = namedtuple(
    'RegisterRow',
    'date description account amount running_total running_balance line'
)
RegisterReport = namedtuple('RegisterReport', 'rows balance')

NetWorthLine = namedtuple('NetWorthLine', 'account kind balance value')
Unconverted = namedtuple('Unconverted', 'account kind balance error')
NetWorthReport = namedtuple(
    'NetWorthReport',
    'date commodity assets liabilities net_worth lines unconverted partial'
)


def select_postings(ledger, accounts=None, pattern=None, date_range=None):
    """Postings matching an account filter.

    Parameters:
        ledger (Ledger): Ledger to read.
        accounts (str or list): One or more account prefixes. A posting
            matches when it is in, or below, any of them.
        pattern (str): Regular expression searched for in the account
            name, case insensitive.
        date_range (DateRange): Days to include.

    Returns:
        list: Matching :obj:`Posting` objects in ledger order.
    """
    if isinstance(accounts, str):
        accounts = [accounts]
    prefixes = list(accounts or [None])

    if len(prefixes) == 1:
        postings = ledger.postings_for_account(prefixes[0], date_range)
    else:
        postings = [
            p for p in ledger.postings(date_range)
            if any(is_subaccount(p.account, x) for x in prefixes)
        ]

    if pattern:
        regex = re.compile(pattern, re.IGNORECASE)
        postings = [p for p in postings if regex.search(p.account)]

    return postings


def _truncate(account, depth):
    if depth is None:
        return account
    return ':'.join(split_account(account)[:depth])


def balance_report(ledger, accounts=None, pattern=None, date_range=None,
                   show_empty=False, depth=None):
    """Per account balances with sub-account totals rolled up.

    Parameters:
        ledger (Ledger): Ledger to read.
        accounts (str or list): Account prefixes, see
            :func:`select_postings`.
        pattern (str): Account regular expression.
        date_range (DateRange): Days to include.
        show_empty (bool): Keep accounts whose balance is zero in every
            commodity.
        depth (int): Fold accounts deeper than this into their ancestor.

    Returns:
        BalanceReport:
            ``balances``: account to balance for the accounts that hold
            postings (after folding to `depth`).
            ``totals``: account to balance for every account in the tree,
            ancestors included. An ancestor total is the sum of its own
            postings and all of its descendants. Unless `show_empty` is
            set, zero quantities are dropped, so an ancestor whose
            descendants cancel out but are not zero themselves is kept
            with an empty balance ``{}``.
            ``rows``: :obj:`BalanceRow` per account of ``totals`` in tree
            order.
            ``grand_total``: balance of all matched postings.
    """
    own = {}
    grand_total = {}
    for posting in select_postings(ledger, accounts, pattern, date_range):
        amount = posting.amount
        account = _truncate(posting.account, depth)
        add_quantity(own.setdefault(account, {}), amount.commodity,
                     amount.quantity)
        add_quantity(grand_total, amount.commodity, amount.quantity)

    totals = {}
    for account, balance in own.items():
        for node in account_parents(account) + [account]:
            node_total = totals.setdefault(node, {})
            for commodity, quantity in balance.items():
                add_quantity(node_total, commodity, quantity)

    if show_empty:
        shown = set(totals)
    else:
        shown = set(a for a, b in totals.items() if nonzero(b))
        for account in list(shown):
            shown.update(account_parents(account))

    def tidy(balance):
        if show_empty:
            return dict(balance)
        return nonzero(balance)

    rows = tuple(
        BalanceRow(a, account_depth(a), tidy(totals[a]))
        for a in sorted(shown, key=split_account)
    )

    return BalanceReport(
        balances=dict(
            (a, tidy(b)) for a, b in own.items() if a in shown
        ),
        totals=dict((row.account, row.balance) for row in rows),
        rows=rows,
        grand_total=tidy(grand_total),
    )


def register_report(ledger, accounts=None, pattern=None, date_range=None):
    """Postings with a running balance.

    The running balance starts from zero at the first matched posting and
    only sums the matched postings, one running sum per commodity.

    Returns:
        RegisterReport: ``rows`` is a tuple of :obj:`RegisterRow`, where
        ``running_total`` is the running :obj:`Amount` in the posting's own
        commodity and ``running_balance`` a snapshot of every running sum.
        ``balance`` is the final running balance.
    """
    running = {}
    rows = []
    for posting in select_postings(ledger, accounts, pattern, date_range):
        transaction = posting.transaction
        amount = posting.amount
        add_quantity(running, amount.commodity, amount.quantity)

        rows.append(RegisterRow(
            date=transaction.date,
            description=transaction.description,
            account=posting.account,
            amount=amount,
            running_total=Amount(running[amount.commodity], amount.commodity),
            running_balance=dict(running),
            line=posting.line,
        ))

    return RegisterReport(rows=tuple(rows), balance=dict(running))


def _classify(account, assets, liabilities):
    top = split_account(account)[0]
    if top in assets:
        return ASSET
    if top in liabilities:
        return LIABILITY
    return None


def net_worth_report(ledger, prices, date, commodity,
                     assets=('Assets',), liabilities=('Liabilities',)):
    """Assets minus liabilities in one commodity.

    Balances in other commodities are converted with the latest price on or
    before `date`. A balance with no usable price is left out of the totals,
    listed in ``unconverted`` in its own commodity, and the report is marked
    ``partial``.

    Parameters:
        ledger (Ledger): Ledger to read.
        prices (PriceIndex): Price history used for conversion.
        date (date): Last day included.
        commodity (str): Reporting commodity.
        assets (list): Top level account names holding assets.
        liabilities (list): Top level account names holding liabilities.

    Returns:
        NetWorthReport: ``assets`` and ``liabilities`` are :obj:`Decimal`
        totals in `commodity`, ``liabilities`` counted as the amount owed.
        ``net_worth`` is their difference. ``lines`` holds a
        :obj:`NetWorthLine` per converted account balance.
    """
    if prices is None:
        prices = PriceIndex()

    if date < date.max:
        date_range = DateRange(end=date + timedelta(days=1))
    else:
        date_range = DateRange()
    balances = {}
    for posting in ledger.postings(date_range):
        if _classify(posting.account, assets, liabilities) is None:
            continue
        add_quantity(
            balances.setdefault(posting.account, {}),
            posting.amount.commodity, posting.amount.quantity
        )

    total_assets = Decimal(0)
    total_owed = Decimal(0)
    lines = []
    unconverted = []

    for account in sorted(balances, key=split_account):
        kind = _classify(account, assets, liabilities)
        for symbol, quantity in sorted(nonzero(balances[account]).items()):
            balance = Amount(quantity, symbol)
            try:
                value = prices.convert(balance, commodity, date)
            except NoPriceDataError as e:
                unconverted.append(Unconverted(account, kind, balance, e))
                continue

            lines.append(NetWorthLine(account, kind, balance, value))
            if kind == ASSET:
                total_assets += value.quantity
            else:
                total_owed -= value.quantity

    if unconverted:
        logger.warning(Messages.partial.format(
            date.isoformat(), len(unconverted)
        ))

    return NetWorthReport(
        date=date,
        commodity=commodity,
        assets=total_assets,
        liabilities=total_owed,
        net_worth=total_assets - total_owed,
        lines=tuple(lines),
        unconverted=tuple(unconverted),
        partial=bool(unconverted),
    )
