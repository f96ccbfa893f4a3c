"""Build transactions and prices from journal tokens.

The parser only checks the grammar. Elided amounts stay ``None`` and
balance is not checked here, see :mod:`pyledgerquery.balance`.
"""

from pyledgerquery import lexer
from pyledgerquery.errors import LexError, ParseError
from pyledgerquery.functions import valid_account
from pyledgerquery.journal import Amount, Posting, PriceEntry, Transaction
from pyledgerquery.lexer import (
    CODE, COMMENT, COMMODITY, DATE, EOF, EQUALS, INDENT, NEWLINE, NUMBER,
    PRICE, SIGN, STATUS, TEXT, TIME,
)
from pyledgerquery.strings import AmountFormat, Errors, Status

AMOUNT_TOKENS = (NUMBER, SIGN, COMMODITY, TEXT)


def describe(token):
    """Short text for a token in error messages."""
    if token.type == EOF:
        return 'end of input'
    if token.type == NEWLINE:
        return 'end of line'
    return '{} {!r}'.format(token.type.lower(), str(token.value))


class Parser(object):
    """Recursive descent parser over a token stream.

    Parameters:
        tokens (iterable): :obj:`lexer.Token` objects, ending with ``EOF``.
    """

    def __init__(self, tokens):
        self._tokens = iter(tokens)
        self._current = next(self._tokens)

    def _peek(self):
        return self._current

    def _next(self):
        token = self._current
        if token.type != EOF:
            self._current = next(self._tokens)
        return token

    def _accept(self, kind):
        if self._current.type == kind:
            return self._next()
        return None

    def _expect(self, kind, expected=None):
        token = self._current
        if token.type != kind:
            expected = expected or kind.lower()
            raise ParseError(
                Errors.unexpected.format(expected, describe(token)),
                token.line, token.column,
                expected=expected, found=describe(token)
            )
        return self._next()

    def _end_of_line(self):
        if self._current.type != EOF:
            self._expect(NEWLINE, 'end of line')

    def entries(self):
        """Generate :obj:`Transaction` and :obj:`PriceEntry` objects.

        Raises:
            ParseError: When the tokens do not follow the journal grammar.
            LexError: Passed through from the token stream.
        """
        while True:
            token = self._peek()

            if token.type == EOF:
                return
            elif token.type == NEWLINE:
                self._next()
            elif token.type == COMMENT:
                self._next()
                self._end_of_line()
            elif token.type == DATE:
                yield self.transaction()
            elif token.type == PRICE:
                yield self.price()
            elif token.type == INDENT:
                self._next()
                if not self._accept(COMMENT):
                    raise ParseError(
                        Errors.orphan_posting, token.line, token.column,
                        expected='transaction header', found='posting line'
                    )
                self._end_of_line()
            else:
                raise ParseError(
                    Errors.unexpected.format(
                        'transaction or price entry', describe(token)
                    ),
                    token.line, token.column,
                    expected='transaction or price entry',
                    found=describe(token)
                )

    def transaction(self):
        """Parse a header line and its postings."""
        head = self._expect(DATE)
        aux_date = None
        if self._accept(EQUALS):
            aux_date = self._expect(DATE, 'closing date').value

        status = Status.none
        token = self._accept(STATUS)
        if token:
            status = token.value

        code = None
        token = self._accept(CODE)
        if token:
            code = token.value

        token = self._peek()
        if token.type != TEXT:
            raise ParseError(
                Errors.no_description, token.line, token.column,
                expected='description', found=describe(token)
            )
        description = self._next().value

        comment = None
        token = self._accept(COMMENT)
        if token:
            comment = token.value
        self._end_of_line()

        notes = []
        postings = []
        while self._accept(INDENT):
            token = self._accept(COMMENT)
            if token:
                if postings:
                    postings[-1]['notes'].append(token.value)
                else:
                    notes.append(token.value)
                self._end_of_line()
            else:
                postings.append(self.posting())

        if len(postings) < 2:
            token = self._peek()
            if not postings and token.type == EOF:
                raise ParseError(
                    Errors.unexpected.format('posting line', describe(token)),
                    token.line, token.column,
                    expected='posting line', found=describe(token)
                )
            raise ParseError(
                Errors.few_postings.format(len(postings)), head.line,
                head.column, expected='two or more postings',
                found='{} postings'.format(len(postings))
            )

        return Transaction(
            date=head.value,
            aux_date=aux_date,
            status=status,
            code=code,
            description=description,
            comment=comment,
            notes=notes,
            postings=[Posting(**p) for p in postings],
            line=head.line
        )

    def posting(self):
        """Parse the rest of a posting line, after its indentation.

        Returns:
            dict: Keyword arguments for :obj:`Posting`.
        """
        token = self._expect(TEXT, 'account')
        if not valid_account(token.value):
            raise ParseError(
                Errors.bad_account.format(token.value),
                token.line, token.column,
                expected='account path', found=repr(token.value)
            )

        amount = None
        if self._peek().type in AMOUNT_TOKENS:
            amount = self.amount()

        comment = None
        found = self._accept(COMMENT)
        if found:
            comment = found.value
        self._end_of_line()

        return {
            'account': token.value,
            'amount': amount,
            'comment': comment,
            'notes': [],
            'line': token.line,
        }

    def amount(self):
        """Parse an amount.

        Accepted forms are a commodity then a quantity (``$5``, ``$ -5``,
        ``-$5``) or a quantity then a commodity (``5 USD``, ``5AAPL``). The
        written layout is kept in the amount's ``format`` and ``quoted``.
        """
        first = self._peek()
        tokens = []
        while self._peek().type in AMOUNT_TOKENS:
            tokens.append(self._next())

        def fail(reason):
            raise ParseError(
                Errors.bad_amount.format(reason), first.line, first.column,
                expected='amount',
                found=' '.join(describe(t) for t in tokens)
            )

        signs = [t for t in tokens if t.type == SIGN]
        rest = [t for t in tokens if t.type != SIGN]
        shape = tuple(t.type for t in rest)

        for token in rest:
            if token.type == TEXT:
                fail('unexpected {!r}'.format(token.value))
        if NUMBER not in shape:
            fail('no quantity')
        if COMMODITY not in shape:
            fail('no commodity')
        if shape not in ((COMMODITY, NUMBER), (NUMBER, COMMODITY)):
            fail('too many parts')

        number = rest[shape.index(NUMBER)]
        commodity = rest[shape.index(COMMODITY)]
        quantity = number.value

        if signs:
            if len(signs) > 1 or quantity < 0 \
                    or tokens.index(signs[0]) > tokens.index(number):
                fail('misplaced sign')
            if signs[0].value == '-':
                quantity = -quantity

        position = tokens.index(commodity)
        if position < tokens.index(number):
            spaced = tokens[position + 1].spaced
            layout = AmountFormat.left_spaced if spaced else AmountFormat.left
        elif commodity.spaced:
            layout = AmountFormat.right_spaced
        else:
            layout = AmountFormat.right

        return Amount(quantity, commodity.value, layout, commodity.quoted)

    def price(self):
        """Parse a ``P DATE [TIME] COMMODITY AMOUNT`` directive."""
        head = self._expect(PRICE)
        day = self._expect(DATE).value
        self._accept(TIME)
        commodity = self._expect(COMMODITY, 'commodity').value

        if self._peek().type not in AMOUNT_TOKENS:
            token = self._peek()
            raise ParseError(
                Errors.unexpected.format('price', describe(token)),
                token.line, token.column,
                expected='price', found=describe(token)
            )
        price = self.amount()

        self._accept(COMMENT)
        self._end_of_line()

        return PriceEntry(day, commodity, price, head.line)


def split_entries(text):
    """Split journal text into one chunk per entry.

    A line starting in the first column opens a chunk, blank lines close
    it, indented lines extend it.

    Yields:
        tuple: ``(line, text)`` with the line number of the first line.
    """
    chunk = []
    start = None

    for offset, raw in enumerate(lexer.lines(text)):
        if raw.strip() == '':
            if chunk:
                yield start, '\n'.join(chunk)
            chunk = []
            continue

        if chunk and raw[0] not in (' ', '\t'):
            yield start, '\n'.join(chunk)
            chunk = []

        if not chunk:
            start = offset + 1
        chunk.append(raw)

    if chunk:
        yield start, '\n'.join(chunk)


def parse_journal(text):
    """Parse journal text entry by entry.

    A malformed entry does not stop parsing, its error is yielded in
    place of the entry and parsing resumes with the next chunk.

    Parameters:
        text (str): Journal or price database text.

    Yields:
        :obj:`Transaction`, :obj:`PriceEntry`, or the :obj:`LexError` /
        :obj:`ParseError` of an entry that failed, in source order.
    """
    for start, chunk in split_entries(text):
        try:
            for entry in Parser(lexer.tokenize(chunk, line=start)).entries():
                yield entry
        except (LexError, ParseError) as e:
            yield e
