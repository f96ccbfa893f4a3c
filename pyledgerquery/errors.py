"""Exceptions raised while loading and querying a journal."""

from pyledgerquery.strings import Errors


class LedgerError(Exception):
    """Base class for every journal error.

    Attributes:
        message (str): Human readable reason.
        line (int): Source line the error refers to, or ``None``.
    """

    def __init__(self, message, line=None):
        self.message = message
        self.line = line
        super(LedgerError, self).__init__(str(self))

    def __str__(self):
        if self.line is None:
            return self.message
        return 'line {}: {}'.format(self.line, self.message)


class LexError(LedgerError):
    """Malformed token in the journal text."""

    def __init__(self, reason, line, column):
        self.column = column
        super(LexError, self).__init__(reason, line)

    def __str__(self):
        return 'line {}, column {}: {}'.format(
            self.line, self.column, self.message
        )


class ParseError(LedgerError):
    """Grammar violation.

    Attributes:
        expected (str): What the parser was looking for, if known.
        found (str): What it got instead.
    """

    def __init__(self, message, line, column=None, expected=None, found=None):
        self.column = column
        self.expected = expected
        self.found = found
        super(ParseError, self).__init__(message, line)

    def __str__(self):
        where = 'line {}'.format(self.line)
        if self.column is not None:
            where += ', column {}'.format(self.column)
        return '{}: {}'.format(where, self.message)


class BalanceError(LedgerError):
    """Transaction that cannot be balanced.

    Attributes:
        transaction (Transaction): The offending, unvalidated transaction.
        commodity (str): Commodity whose postings do not net to zero, or
            ``None`` when the failure is not tied to one commodity.
        residual (Amount): The non-zero sum, or ``None``.
    """

    def __init__(self, message, transaction, commodity=None, residual=None):
        self.transaction = transaction
        self.commodity = commodity
        self.residual = residual
        super(BalanceError, self).__init__(message, transaction.line)

    def __str__(self):
        text = '{} ({} {})'.format(
            self.message,
            self.transaction.date.isoformat(),
            self.transaction.description
        )
        if self.residual is not None:
            text += ': residual {}'.format(self.residual.to_string())
        if self.line is not None:
            text = 'line {}: {}'.format(self.line, text)
        return text


class NoPriceDataError(LedgerError, LookupError):
    """No recorded conversion rate for a commodity pair at a date."""

    def __init__(self, source, target, date):
        self.source = source
        self.target = target
        self.date = date
        super(NoPriceDataError, self).__init__(
            Errors.no_price.format(source, target, date.isoformat())
        )


class LoadErrors(LedgerError):
    """Batch of load time errors, raised on request by strict callers."""

    def __init__(self, errors):
        self.errors = list(errors)
        super(LoadErrors, self).__init__(
            '{} entries failed to load'.format(len(self.errors))
        )

    def __str__(self):
        lines = [self.message] + ['  ' + str(e) for e in self.errors]
        return '\n'.join(lines)
