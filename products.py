import logging
import time

from constants import CATEGORIES, DEFAULT_CATEGORY, INITIAL_PRODUCTS, PRODUCTS_KEY
from models import Product

logger = logging.getLogger(__name__)


class ProductValidationError(ValueError):
    """Raised when a product form is rejected. `errors` maps field -> message."""

    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


class ProductNotFoundError(KeyError):
    pass


def new_product_id():
    return str(int(time.time() * 1000))


def validate_product_form(form, product_id=None, catalog=None):
    """Turn raw form input into a Product, or raise ProductValidationError.

    `form` holds strings keyed barcode / name_en / name_ar / price / category.
    When `catalog` is given the barcode must not belong to another product.
    """
    errors = {}
    barcode = (form.get('barcode') or '').strip()
    name_en = (form.get('name_en') or '').strip()
    name_ar = (form.get('name_ar') or '').strip()
    category = (form.get('category') or '').strip() or DEFAULT_CATEGORY
    raw_price = form.get('price')

    if not barcode:
        errors['barcode'] = 'Barcode is required'
    if not name_en:
        errors['name_en'] = 'English name is required'
    if not name_ar:
        errors['name_ar'] = 'Arabic name is required'

    price = None
    if raw_price is None or str(raw_price).strip() == '':
        errors['price'] = 'Price is required'
    else:
        try:
            price = float(str(raw_price).strip())
        except ValueError:
            errors['price'] = 'Price must be a number'
        else:
            if price != price or price in (float('inf'), float('-inf')):
                errors['price'] = 'Price must be a number'
            elif price < 0:
                errors['price'] = 'Price cannot be negative'

    if category not in CATEGORIES:
        errors['category'] = f'Unknown category: {category}'

    if barcode and catalog is not None:
        existing = catalog.get_product_by_barcode(barcode)
        if existing is not None and existing.id != product_id:
            errors['barcode'] = f'Barcode already used by {existing.name_en}'

    if errors:
        raise ProductValidationError(errors)

    return Product(product_id or new_product_id(), barcode, name_en, name_ar, price, category)


#Catalog store
class CatalogStore:
    """Sellable products, written through to the local store on every change."""

    def __init__(self, store, initial_products=None):
        self.store = store
        defaults = INITIAL_PRODUCTS if initial_products is None else initial_products
        # set when the stored catalog could not be loaded; it is then never overwritten
        self.degraded = False
        self._products = self._load(defaults)

    def _load(self, defaults):
        raw, ok = self.store.read_checked(PRODUCTS_KEY, defaults)
        self.degraded = not ok
        try:
            return [Product.from_dict(r) for r in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored catalog is malformed; using seed catalog")
            self.degraded = True
            return [Product.from_dict(r) for r in defaults]

    def _save(self):
        if self.degraded:
            logger.warning("Catalog changes kept in memory only; the stored catalog could not be loaded")
            return False
        return self.store.write(PRODUCTS_KEY, [p.to_dict() for p in self._products])

    def list_products(self):
        return list(self._products)

    def get_product(self, product_id):
        for p in self._products:
            if p.id == product_id:
                return p
        return None

    def get_product_by_barcode(self, barcode):
        for p in self._products:
            if p.barcode == barcode:
                return p
        return None

    def add_product(self, product):
        self._products = self._products + [product]
        self._save()
        logger.info("Product added: %s (%s)", product.name_en, product.id)
        return product

    def update_product(self, product):
        if self.get_product(product.id) is None:
            raise ProductNotFoundError(product.id)
        self._products = [product if p.id == product.id else p for p in self._products]
        self._save()
        logger.info("Product updated: %s (%s)", product.name_en, product.id)
        return product

    def delete_product(self, product_id):
        remaining = [p for p in self._products if p.id != product_id]
        if len(remaining) == len(self._products):
            return False
        self._products = remaining
        self._save()
        logger.info("Product deleted: %s", product_id)
        return True

    def search(self, query):
        if not query:
            return self.list_products()
        q = query.lower()
        return [
            p for p in self._products
            if q in p.name_en.lower() or q in p.name_ar or q in p.barcode
        ]
