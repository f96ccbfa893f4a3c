"""Balance transactions and infer elided amounts."""

from pyledgerquery.errors import BalanceError
from pyledgerquery.journal import Amount
from pyledgerquery.strings import Errors


def autobalance(transaction):
    """Validate a parsed transaction.

    The input is never modified. When one posting has no amount and the
    other postings leave a residual in exactly one commodity, a new
    transaction is returned in which that posting carries the negated
    residual and is marked ``inferred``.

    Parameters:
        transaction (Transaction): Transaction as read by the parser.

    Returns:
        Transaction: `transaction` itself when it already balances,
        otherwise a new, fully specified copy.

    Raises:
        BalanceError: When the postings do not sum to zero in every
            commodity and the difference cannot be assigned to a single
            elided posting.
    """
    elided = transaction.elided
    residuals = transaction.residuals()

    if len(elided) > 1:
        raise BalanceError(
            Errors.two_elided.format(len(elided)), transaction
        )

    if not elided:
        if not residuals:
            return transaction

        commodity = sorted(residuals)[0]
        raise BalanceError(
            Errors.unbalanced, transaction, commodity,
            Amount(residuals[commodity], commodity)
        )

    if not residuals:
        raise BalanceError(Errors.nothing_to_infer, transaction)

    if len(residuals) > 1:
        commodity = sorted(residuals)[0]
        raise BalanceError(
            Errors.multi_residual.format(len(residuals)), transaction,
            commodity, Amount(residuals[commodity], commodity)
        )

    (commodity, residual), = residuals.items()
    postings = []
    for posting in transaction.postings:
        if posting is elided[0]:
            posting = posting.replace(
                amount=Amount(-residual, commodity), inferred=True
            )
        postings.append(posting)

    return transaction.replace(postings=postings)


def validate(transactions):
    """Balance a sequence of transactions, collecting the failures.

    Parameters:
        transactions (iterable): Parsed :obj:`Transaction` objects.

    Returns:
        tuple: ``(valid, errors)``, the balanced transactions in input
        order and a list of :obj:`BalanceError`.
    """
    valid = []
    errors = []
    for transaction in transactions:
        try:
            valid.append(autobalance(transaction))
        except BalanceError as e:
            errors.append(e)

    return valid, errors
