import json
import logging
import os
from collections import OrderedDict
from datetime import date, datetime, timezone

from constants import DAILY_SERIES_DAYS, DEFAULT_LANGUAGE, LANGUAGE_KEY, LANGUAGES, TAX_RATE
from models import Cart
from transactions import create_transaction, parse_timestamp

logger = logging.getLogger(__name__)


class _Notifier:
    def __init__(self):
        self._listeners = []

    def subscribe(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)


#Cart service
class CartService(_Notifier):
    """Owns the in-progress cart; listeners are called after every change."""

    def __init__(self, catalog, tax_rate=TAX_RATE):
        super().__init__()
        self.catalog = catalog
        self.tax_rate = tax_rate
        self.cart = Cart()

    @property
    def items(self):
        return list(self.cart.items)

    def add(self, product):
        self.cart.add(product)
        self._notify()

    def add_by_id(self, product_id):
        product = self.catalog.get_product(product_id)
        if product is None:
            return False
        self.add(product)
        return True

    def remove(self, product_id):
        self.cart.remove(product_id)
        self._notify()

    def set_quantity_delta(self, product_id, delta):
        self.cart.set_quantity_delta(product_id, delta)
        self._notify()

    def clear(self):
        self.cart.clear()
        self._notify()

    def is_empty(self):
        return self.cart.is_empty()

    def compute_totals(self):
        return self.cart.compute_totals(self.tax_rate)

    def snapshot(self):
        return self.cart.snapshot()

    def scan(self, text):
        """Barcode fast path.

        Returns True when the trimmed input is exactly a product barcode; one
        unit is added and the caller should clear its search input. Otherwise
        nothing changes and the input stays as a free-text search.
        """
        code = (text or '').strip()
        if not code:
            return False
        product = self.catalog.get_product_by_barcode(code)
        if product is None:
            return False
        self.add(product)
        return True


#Check-out service
class CheckoutService:

    def __init__(self, ledger, tax_rate=TAX_RATE, clock=None):
        self.ledger = ledger
        self.tax_rate = tax_rate
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def checkout(self, cart):
        if cart.is_empty():
            return None  # nothing to sell

        now = self.clock()
        trans_id = self.ledger.next_id(int(now.timestamp() * 1000))
        transaction = create_transaction(
            cart.snapshot(),
            tax_rate=self.tax_rate,
            now=now,
            transaction_id=trans_id,
        )
        self.ledger.append(transaction)
        cart.clear()
        logger.info("Sale %s recorded: %d line(s), total %.2f",
                    transaction.id, len(transaction.items), transaction.total)
        return transaction


#Report service
class ReportService:
    """Aggregates over the ledger, computed on demand."""

    def __init__(self, ledger, tz=None):
        self.ledger = ledger
        self.tz = tz

    def total_revenue(self):
        return sum(t.total for t in self.ledger.all())

    def total_transaction_count(self):
        return len(self.ledger)

    def _local_date(self, transaction):
        ts = parse_timestamp(transaction.date)
        # astimezone(None) converts to the machine's local zone
        return ts.astimezone(self.tz).date()

    def daily_series(self, days=DAILY_SERIES_DAYS):
        """Sales per calendar date, oldest first, limited to the last `days` dates
        that have sales. Dates without sales are left out."""
        per_day = {}
        for t in self.ledger.all():
            try:
                day = self._local_date(t)
            except ValueError:
                logger.warning("Transaction %s has an unreadable date %r", t.id, t.date)
                continue
            per_day[day] = per_day.get(day, 0.0) + t.total

        ordered = OrderedDict(sorted(per_day.items()))
        recent = list(ordered.items())[-days:] if days > 0 else []
        return [{'date': day.isoformat(), 'amount': amount} for day, amount in recent]

    def summary(self, days=DAILY_SERIES_DAYS):
        return {
            'total_revenue': self.total_revenue(),
            'total_transactions': self.total_transaction_count(),
            'daily_series': self.daily_series(days),
        }


#Settings service
class SettingsService(_Notifier):

    def __init__(self, store):
        super().__init__()
        self.store = store
        lang = store.read(LANGUAGE_KEY, DEFAULT_LANGUAGE)
        self._language = lang if lang in LANGUAGES else DEFAULT_LANGUAGE

    @property
    def language(self):
        return self._language

    def set_language(self, lang):
        if lang not in LANGUAGES:
            raise ValueError(f"Unsupported language {lang!r}")
        self._language = lang
        self.store.write(LANGUAGE_KEY, lang)
        self._notify()

    def toggle_language(self):
        self.set_language('ar' if self._language == 'en' else 'en')
        return self._language


#Backup service
class BackupService:
    """Read-only dump of the catalog and ledger for download."""

    def __init__(self, catalog, ledger):
        self.catalog = catalog
        self.ledger = ledger

    def export_snapshot(self):
        return {
            'products': [p.to_dict() for p in self.catalog.list_products()],
            'transactions': [t.to_dict() for t in self.ledger.all()],
        }

    @staticmethod
    def backup_filename(day=None):
        day = day or date.today()
        return f"pos_backup_{day.isoformat()}.json"

    def write_backup(self, directory, day=None):
        os.makedirs(directory, exist_ok=True)
        return self.save(os.path.join(directory, self.backup_filename(day)))

    def save(self, path):
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(self.export_snapshot(), fh, ensure_ascii=False, indent=2)
        logger.info("Backup written to %s", path)
        return path
