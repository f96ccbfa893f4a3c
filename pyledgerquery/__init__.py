"""Plain text ledger parsing and reporting."""

from pyledgerquery.ledger2python import (
    import_journal, import_prices, load_journal, load_prices,
)
from pyledgerquery.reports import (
    balance_report, net_worth_report, register_report,
)

__version__ = '0.2'
