"""String constants."""


class Status(object):
    cleared = '*'
    pending = '!'
    none = ''


class AmountFormat(object):
    left = 'symbol left'
    left_spaced = 'symbol left, spaced'
    right = 'symbol right'
    right_spaced = 'symbol right, spaced'


class Errors(object):
    unterminated_string = 'Unterminated quoted string'
    empty_symbol = 'Empty quoted commodity'
    unterminated_code = 'Unterminated transaction code'
    bad_number = 'Malformed numeric literal {!r}'
    bad_date = 'Invalid date {!r}'
    bad_time = 'Invalid time {!r}'

    few_postings = 'Transaction needs at least two postings, found {}'
    bad_account = 'Malformed account path {!r}'
    orphan_posting = 'Posting line without a transaction header'
    no_description = 'Transaction header has no description'
    bad_amount = 'Malformed amount: {}'
    unexpected = 'Expected {}, found {}'

    two_elided = '{} postings have no amount, at most one may be elided'
    multi_residual = 'Cannot infer elided amount, residual spans {} commodities'
    nothing_to_infer = 'Elided posting has nothing to balance'
    unbalanced = 'Transaction does not balance'

    no_price = 'No price for {} in {} on or before {}'


class Messages(object):
    loaded = 'Loaded {} transactions and {} prices from {} lines'
    diagnostic = 'Skipped entry: {}'
    duplicate_price = 'Duplicate price for {}/{} on {}, keeping the last one'
    partial = 'Net worth as of {} is partial, {} balances could not be converted'
