"""Journal data structures."""

from collections import namedtuple
from decimal import Decimal
import re
import weakref

from pyledgerquery.functions import add_quantity, nonzero
from pyledgerquery.strings import AmountFormat, Status

TAG_REGEX = re.compile(r'^:((?:[^:\s]+:)+)$')
META_REGEX = re.compile(r'^([\w-]+):\s+(.*)$')
PLAIN_SYMBOL = re.compile(r'^[A-Za-z_]+$')


def symbol_text(symbol):
    """Commodity as written in a journal, quoted when it has to be."""
    if PLAIN_SYMBOL.match(symbol):
        return symbol
    if len(symbol) == 1 and not symbol.isalnum():
        return symbol
    return '"{}"'.format(symbol)


def read_notes(notes):
    """Split comment lines into tags and metadata.

    Parameters:
        notes (list): Comment strings with the leading ``;`` removed.

    Returns:
        tuple: ``(tags, metadata)`` where tags is a tuple of strings and
        metadata a tuple of ``(key, value)`` pairs.
    """
    tags = []
    metadata = []
    for note in notes:
        note = note.strip()
        tag_match = TAG_REGEX.match(note)
        if tag_match:
            tags.extend(x for x in tag_match.group(1).split(':') if x)
            continue

        meta_match = META_REGEX.match(note)
        if meta_match:
            metadata.append((meta_match.group(1), meta_match.group(2)))

    return tuple(tags), tuple(metadata)


class Amount(namedtuple('Amount', 'quantity commodity')):
    """Quantity of a single commodity.

    Attributes:
        quantity (Decimal): Signed, arbitrary precision value.
        commodity (str): Commodity symbol. ``$``, ``USD``, ``AAPL`` etc.
        format (str): One of the :obj:`AmountFormat` layouts the amount
            was written in, ``None`` when built in code.
        quoted (bool): The commodity was written in double quotes.

    `format` and `quoted` only affect :meth:`to_string`, two amounts with
    the same quantity and commodity are equal however they were written.
    """

    format = None
    quoted = False

    def __new__(cls, quantity, commodity, format=None, quoted=False):
        self = super(Amount, cls).__new__(cls, Decimal(quantity), commodity)
        self.format = format
        self.quoted = quoted
        return self

    def _restyle(self, quantity):
        return Amount(quantity, self.commodity, self.format, self.quoted)

    def __neg__(self):
        return self._restyle(-self.quantity)

    def __add__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        if other.commodity != self.commodity:
            raise ValueError(
                'Cannot add {} to {}'.format(other.commodity, self.commodity)
            )
        return self._restyle(self.quantity + other.quantity)

    def __sub__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        return self + (-other)

    def is_zero(self):
        return self.quantity == 0

    def to_string(self):
        """Amount as ledger text.

        Parsed amounts are written back the way they were read. Otherwise
        single symbol commodities go on the left (``$-5.00``), plain
        alphabetic ones on the right (``50.00 USD``) and anything else is
        quoted (``10 "MUTF2351"``).
        """
        symbol = self.commodity
        if self.quoted:
            symbol = '"{}"'.format(symbol)

        if self.format == AmountFormat.left:
            return '{}{}'.format(symbol, self.quantity)
        if self.format == AmountFormat.left_spaced:
            return '{} {}'.format(symbol, self.quantity)
        if self.format == AmountFormat.right:
            return '{}{}'.format(self.quantity, symbol)
        if self.format == AmountFormat.right_spaced:
            return '{} {}'.format(self.quantity, symbol)

        if self.quoted:
            return '{} {}'.format(self.quantity, symbol)
        if len(symbol) == 1 and not symbol.isalnum():
            return '{}{}'.format(symbol, self.quantity)
        return '{} {}'.format(self.quantity, symbol_text(symbol))


class PriceEntry(namedtuple('PriceEntry', 'date commodity price line')):
    """Market price of one unit of `commodity` on `date`.

    Attributes:
        date (date): Day the price was recorded.
        commodity (str): Source commodity.
        price (Amount): Value of one unit, in the target commodity.
        line (int): Source line, ``None`` when built in code.
    """

    __slots__ = ()

    def __new__(cls, date, commodity, price, line=None):
        return super(PriceEntry, cls).__new__(cls, date, commodity, price, line)

    @property
    def source(self):
        return self.commodity

    @property
    def target(self):
        return self.price.commodity

    def to_string(self):
        return 'P {} {} {}'.format(
            self.date.isoformat(), symbol_text(self.commodity),
            self.price.to_string()
        )


class _ReadOnly(object):
    """Refuse attribute assignment once construction is complete."""

    _frozen = False

    def __setattr__(self, name, value):
        if self._frozen:
            raise AttributeError(
                '{} objects are read-only'.format(type(self).__name__)
            )
        object.__setattr__(self, name, value)


class Posting(_ReadOnly):
    """Posting class for transactions.

    Attributes:
        account (str): Name of the ledger account for this posting.
        amount (Amount): Value of the posting, ``None`` when elided.
        inferred (bool): Set to `True` when the amount was filled in by
            balancing the transaction rather than read from the journal.
        comment (str): Trailing comment on the posting line.
        notes (tuple): Indented comment lines following the posting.
        tags (tuple): Tag strings found in the notes.
        metadata (tuple): Key/value pairs found in the notes.
        line (int): Source line of the posting.
        transaction (Transaction): Owning transaction. Held weakly, so it
            is ``None`` once the transaction itself is gone.
    """

    _fields = ('account', 'amount', 'inferred', 'comment', 'notes', 'line')

    def __init__(self, **kwargs):
        """Initialize posting.

        Parameters:
            account (str): Name of the ledger account for this posting.
            amount (Amount): Value of the posting, or ``None``.
            inferred (bool): Amount was computed by the balancer.
            comment (str): Trailing comment.
            notes (list): Comment lines attached below the posting.
            line (int): Source line number.
        """
        self.account = kwargs['account']
        self.amount = kwargs.get('amount', None)
        self.inferred = kwargs.get('inferred', False)
        self.comment = kwargs.get('comment', None)
        self.notes = tuple(kwargs.get('notes', ()))
        self.line = kwargs.get('line', None)

        self.tags, self.metadata = read_notes(
            ([self.comment] if self.comment else []) + list(self.notes)
        )

        owner = kwargs.get('transaction', None)
        self._owner = weakref.ref(owner) if owner is not None else None
        self._frozen = True

    @property
    def transaction(self):
        if self._owner is None:
            return None
        return self._owner()

    @property
    def elided(self):
        return self.amount is None

    def replace(self, **changes):
        """Copy of this posting with some fields changed."""
        fields = dict((k, getattr(self, k)) for k in self._fields)
        fields['transaction'] = self.transaction
        fields.update(changes)
        return Posting(**fields)

    def to_string(self, width=80, indent=4):
        """ Posting as string. Fix to width in this.

        Keyword Args:
            width (int): White space added after posting acount to align last
                digit of 'amount' to column `width`.
            indent (int): Number of spaces to indent each level of transaction.

        Return:
            str: Ledger formatted string for the posting.
        """

        ind = ' ' * indent
        acct = self.account

        if self.amount is None or self.inferred:
            line = ind + acct
        else:
            amt = self.amount.to_string()
            # Calculate fill, split amount at decimal to align to decimal.
            fill = ' ' * max(2, width - len(acct + amt.split('.')[0] + ind) - 3)
            line = ind + acct + fill + amt

        if self.comment:
            line += '  ; ' + self.comment

        outlist = [line]
        for note in self.notes:
            outlist.append('{}; {}'.format(ind * 2, note))

        return '\n'.join(outlist)


class Transaction(_ReadOnly):
    """Class for transactions.

    Attributes:
        date (date): Transaction date.
        aux_date (date): Optional closing date written as ``date=aux_date``.
        status (str): ``*`` for cleared, ``!`` for pending, empty otherwise.
        code (str): Optional code, written in parentheses before the
            description.
        description (str): Payee or description text.
        comment (str): Trailing comment on the header line.
        notes (tuple): Indented comment lines before the first posting.
        tags (tuple): Tags found in the header comment and notes.
        metadata (tuple): Key/value pairs found in the header comment and
            notes. ``(('key1', 'value1'), ('key2', 'value2'))``
        postings (tuple): :obj:`Posting` objects bound to this transaction.
        line (int): Source line of the header.
    """

    _fields = (
        'date', 'aux_date', 'status', 'code', 'description', 'comment',
        'notes', 'postings', 'line',
    )

    def __init__(self, **kwargs):
        """Initialize Transaction object.

        Postings are copied and bound to the new transaction, so the same
        :obj:`Posting` may be passed to several transactions safely.

        Parameters:
            date (date): Transaction date.
            aux_date (date): Closing date.
            status (str): One of the :obj:`Status` markers.
            code (str): Transaction code.
            description (str): Transaction payee value.
            comment (str): Header comment.
            notes (list): Comment lines before the first posting.
            postings (list): List of :obj:`Posting` objects
            line (int): Source line number.
        """
        self.date = kwargs['date']
        self.aux_date = kwargs.get('aux_date', None)
        self.status = kwargs.get('status', Status.none)
        self.code = kwargs.get('code', None)
        self.description = kwargs['description']
        self.comment = kwargs.get('comment', None)
        self.notes = tuple(kwargs.get('notes', ()))
        self.line = kwargs.get('line', None)

        self.tags, self.metadata = read_notes(
            ([self.comment] if self.comment else []) + list(self.notes)
        )

        self.postings = tuple(
            p.replace(transaction=self) for p in kwargs.get('postings', ())
        )
        self._frozen = True

    @property
    def cleared(self):
        return self.status == Status.cleared

    @property
    def pending(self):
        return self.status == Status.pending

    @property
    def elided(self):
        """Postings without an amount."""
        return [p for p in self.postings if p.amount is None]

    def residuals(self):
        """Sum the non-elided postings per commodity.

        Returns:
            dict: Commodity to :obj:`Decimal`, zero sums dropped.
        """
        totals = {}
        for posting in self.postings:
            if posting.amount is not None:
                add_quantity(
                    totals, posting.amount.commodity, posting.amount.quantity
                )

        return nonzero(totals)

    def is_balanced(self):
        return not self.elided and not self.residuals()

    def replace(self, **changes):
        """Copy of this transaction with some fields changed."""
        fields = dict((k, getattr(self, k)) for k in self._fields)
        fields.update(changes)
        return Transaction(**fields)

    def to_string(self, width=80, indent=4):
        """Transaction to string.

        Keyword Args:
            width (int): Text column to align the end of each transaction
                line to.
            indent (int): Number of spaces to indent each level of transaction.

        Return:
            str: Ledger formatted string for the entire transaction.
        """
        ind = ' ' * indent

        top_row = self.date.isoformat()
        if self.aux_date:
            top_row += '=' + self.aux_date.isoformat()
        if self.status:
            top_row += ' ' + self.status
        if self.code is not None:
            top_row += ' ({})'.format(self.code)
        top_row += ' ' + self.description
        if self.comment:
            top_row += '  ; ' + self.comment

        outlist = [top_row]
        for note in self.notes:
            outlist.append('{}; {}'.format(ind, note))

        postings = [p.to_string(width=width, indent=indent)
                    for p in self.postings]
        outlist.append('\n'.join(postings))

        return '\n'.join(outlist)
