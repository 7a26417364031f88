import logging
from datetime import datetime, timezone

from constants import TAX_RATE, TRANSACTIONS_KEY
from models import Transaction, compute_totals

logger = logging.getLogger(__name__)


def create_transaction(items, tax_rate=TAX_RATE, now=None, transaction_id=None):
    """Build a Transaction from already snapshotted cart items.

    The id is the checkout time in epoch milliseconds unless one is given.
    """
    now = now or datetime.now(timezone.utc)
    totals = compute_totals(items, tax_rate)
    if transaction_id is None:
        transaction_id = str(int(now.timestamp() * 1000))
    return Transaction(
        transaction_id,
        now.astimezone(timezone.utc).isoformat(),
        items,
        totals['subtotal'],
        totals['vat'],
        totals['total'],
    )


def parse_timestamp(value):
    # accept the trailing "Z" written by other clients
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


#Transaction ledger
class Ledger:
    """Append-only list of completed sales."""

    def __init__(self, store):
        self.store = store
        self.degraded = False
        self._transactions = self._load()

    def _load(self):
        raw, ok = self.store.read_checked(TRANSACTIONS_KEY, [])
        self.degraded = not ok
        try:
            return [Transaction.from_dict(r) for r in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored ledger is malformed; starting with an empty ledger")
            self.degraded = True
            return []

    def _save(self):
        # a degraded load must not replace the stored history
        if self.degraded:
            logger.warning("Ledger not saved (%d transaction(s) in memory); the stored ledger could not be loaded",
                           len(self._transactions))
            return False
        return self.store.write(TRANSACTIONS_KEY, [t.to_dict() for t in self._transactions])

    def append(self, transaction):
        if self.get(transaction.id) is not None:
            raise ValueError(f"Duplicate transaction id {transaction.id}")
        self._transactions.append(transaction)
        self._save()
        return transaction

    def get(self, transaction_id):
        for t in self._transactions:
            if t.id == transaction_id:
                return t
        return None

    def all(self):
        return list(self._transactions)

    def next_id(self, candidate):
        """Return `candidate` or the next free millisecond id after it."""
        taken = {t.id for t in self._transactions}
        value = int(candidate)
        while str(value) in taken:
            value += 1
        return str(value)

    def __len__(self):
        return len(self._transactions)
