"""Split ledger journal text into tokens.

The journal format is line oriented, so the lexer works one line at a time
and picks the token rules from the first character of the line:

- leading white space: posting line (``INDENT``, account ``TEXT``, amount
  tokens, ``COMMENT``) or an indented comment,
- a digit: transaction header (``DATE``, ``EQUALS`` ``DATE``, ``STATUS``,
  ``CODE``, description ``TEXT``, ``COMMENT``),
- ``P``: price directive (``PRICE``, ``DATE``, ``TIME``, amount tokens),
- ``;`` or ``#``: comment line.

Every line ends with a ``NEWLINE`` token and the stream with ``EOF``.
"""

from collections import namedtuple
from datetime import date, time
import re

from pyledgerquery.errors import LexError
from pyledgerquery.functions import parse_quantity
from pyledgerquery.strings import Errors

DATE = 'DATE'
TIME = 'TIME'
EQUALS = 'EQUALS'
STATUS = 'STATUS'
CODE = 'CODE'
TEXT = 'TEXT'
NUMBER = 'NUMBER'
SIGN = 'SIGN'
COMMODITY = 'COMMODITY'
COMMENT = 'COMMENT'
PRICE = 'PRICE'
INDENT = 'INDENT'
NEWLINE = 'NEWLINE'
EOF = 'EOF'

COMMENT_CHARS = ';#'
STATUS_CHARS = '*!'
NUMBER_CHARS = '0123456789.,'
# Characters that can never be part of an unquoted commodity symbol.
SYMBOL_STOP = ' \t0123456789-+.,;"@=()[]{}'

DATE_REGEX = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
TIME_REGEX = re.compile(r'^(\d{2}):(\d{2})(?::(\d{2}))?$')
LINE_REGEX = re.compile(r'\r?\n')

# `quoted` is only set on COMMODITY tokens, `spaced` on amount tokens that
# follow white space.
Token = namedtuple(
    'Token', 'type value line column quoted spaced', defaults=(False, False)
)


def lines(text):
    """Split text on \\n or \\r\\n, without a trailing empty line."""
    result = LINE_REGEX.split(text)
    if result and result[-1] == '':
        result.pop()
    return result


def tokenize(text, line=1):
    """Generate the tokens of a journal.

    Parameters:
        text (str): Journal text. ``\\n`` and ``\\r\\n`` line endings are
            both accepted.
        line (int): Line number of the first line of `text`, used when
            lexing a fragment of a larger file.

    Yields:
        Token: ``(type, value, line, column, quoted, spaced)`` tuples,
        columns counted from 1.

    Raises:
        LexError: On a malformed number, date or time, or an unterminated
            or empty quoted string.
    """
    lineno = line
    for offset, raw in enumerate(lines(text)):
        lineno = line + offset
        for token in _LineScanner(raw, lineno).tokens():
            yield token
        yield Token(NEWLINE, None, lineno, len(raw) + 1)

    yield Token(EOF, None, lineno, 1)


class _LineScanner(object):
    """Cursor over a single line of text."""

    def __init__(self, raw, line):
        self.raw = raw
        self.line = line
        self.pos = 0

    @property
    def column(self):
        return self.pos + 1

    def peek(self, offset=0):
        idx = self.pos + offset
        if idx < len(self.raw):
            return self.raw[idx]
        return ''

    def at_end(self):
        return self.pos >= len(self.raw)

    def skip_space(self):
        while self.peek() in (' ', '\t'):
            self.pos += 1

    def take_while(self, chars):
        start = self.pos
        while not self.at_end() and self.peek() in chars:
            self.pos += 1
        return self.raw[start:self.pos]

    def token(self, kind, value, column=None, quoted=False, spaced=False):
        return Token(
            kind, value, self.line, column or self.column, quoted, spaced
        )

    def error(self, reason, column=None):
        return LexError(reason, self.line, column or self.column)

    def tokens(self):
        first = self.peek()

        if self.raw.strip() == '':
            return
        elif first in (' ', '\t'):
            for t in self.posting():
                yield t
        elif first in COMMENT_CHARS:
            yield self.comment()
        elif first.isdigit():
            for t in self.header():
                yield t
        elif first == 'P' and self.peek(1) in (' ', '\t'):
            for t in self.price():
                yield t
        else:
            yield self.token(TEXT, self.raw.strip())
            self.pos = len(self.raw)

    def comment(self):
        column = self.column
        text = self.raw[self.pos + 1:].strip()
        self.pos = len(self.raw)
        return self.token(COMMENT, text, column)

    def date(self):
        column = self.column
        run = self.take_while('0123456789-/.')
        match = DATE_REGEX.match(run)
        if not match:
            raise self.error(Errors.bad_date.format(run), column)

        try:
            value = date(*[int(x) for x in match.groups()])
        except ValueError:
            raise self.error(Errors.bad_date.format(run), column)

        return self.token(DATE, value, column)

    def time(self):
        column = self.column
        run = self.take_while('0123456789:')
        match = TIME_REGEX.match(run)
        if not match:
            raise self.error(Errors.bad_time.format(run), column)

        try:
            value = time(*[int(x) for x in match.groups() if x is not None])
        except ValueError:
            raise self.error(Errors.bad_time.format(run), column)

        return self.token(TIME, value, column)

    def header(self):
        yield self.date()

        if self.peek() == '=':
            yield self.token(EQUALS, '=')
            self.pos += 1
            yield self.date()

        self.skip_space()
        if self.peek() and self.peek() in STATUS_CHARS:
            yield self.token(STATUS, self.peek())
            self.pos += 1
            self.skip_space()

        if self.peek() == '(':
            column = self.column
            end = self.raw.find(')', self.pos)
            if end < 0:
                raise self.error(Errors.unterminated_code, column)
            yield self.token(CODE, self.raw[self.pos + 1:end].strip(), column)
            self.pos = end + 1
            self.skip_space()

        column = self.column
        end = self.raw.find(';', self.pos)
        if end < 0:
            end = len(self.raw)
        description = self.raw[self.pos:end].strip()
        if description:
            yield self.token(TEXT, description, column)
        self.pos = end

        if not self.at_end():
            yield self.comment()

    def posting(self):
        indent = self.take_while(' \t')
        yield self.token(INDENT, indent, 1)

        if self.peek() in COMMENT_CHARS:
            yield self.comment()
            return

        # An account name runs up to two spaces, a tab or a comment.
        column = self.column
        start = self.pos
        while not self.at_end():
            if self.peek() in ('\t', ';'):
                break
            if self.peek() == ' ' and self.peek(1) == ' ':
                break
            self.pos += 1
        yield self.token(TEXT, self.raw[start:self.pos].rstrip(), column)

        for t in self.amount():
            yield t

    def price(self):
        yield self.token(PRICE, 'P')
        self.pos += 1
        self.skip_space()
        yield self.date()
        self.skip_space()

        if self.peek().isdigit() and ':' in self.raw[self.pos:self.pos + 3]:
            yield self.time()

        for t in self.amount():
            yield t

    def amount(self):
        """Tokens of an amount field, up to the end of the line."""
        while True:
            start = self.pos
            self.skip_space()
            spaced = self.pos > start
            char = self.peek()

            if self.at_end():
                return
            elif char == ';':
                yield self.comment()
                return
            elif char == '"':
                yield self.quoted(spaced)
            elif char.isdigit() or (char in '-.' and self.peek(1).isdigit()):
                yield self.number(spaced)
            elif char in '-+':
                yield self.token(SIGN, char, spaced=spaced)
                self.pos += 1
            else:
                column = self.column
                symbol = self.take_while_not(SYMBOL_STOP)
                if symbol:
                    yield self.token(COMMODITY, symbol, column, spaced=spaced)
                else:
                    # Leave unknown characters for the parser to reject.
                    yield self.token(TEXT, char, column)
                    self.pos += 1

    def take_while_not(self, chars):
        start = self.pos
        while not self.at_end() and self.peek() not in chars:
            self.pos += 1
        return self.raw[start:self.pos]

    def number(self, spaced=False):
        column = self.column
        start = self.pos
        if self.peek() == '-':
            self.pos += 1
        self.take_while(NUMBER_CHARS)
        run = self.raw[start:self.pos]

        value = parse_quantity(run)
        if value is None:
            raise self.error(Errors.bad_number.format(run), column)

        return self.token(NUMBER, value, column, spaced=spaced)

    def quoted(self, spaced=False):
        column = self.column
        end = self.raw.find('"', self.pos + 1)
        if end < 0:
            raise self.error(Errors.unterminated_string, column)
        if end == self.pos + 1:
            raise self.error(Errors.empty_symbol, column)

        value = self.raw[self.pos + 1:end]
        self.pos = end + 1
        return self.token(COMMODITY, value, column, quoted=True, spaced=spaced)
