import copy

from constants import TAX_RATE


def compute_totals(items, tax_rate=TAX_RATE):
    """Return {'subtotal', 'vat', 'total'} for a sequence of cart items.

    Values are not rounded here; round only when formatting for display.
    """
    subtotal = sum(item.price * item.quantity for item in items)
    vat = subtotal * tax_rate
    return {'subtotal': subtotal, 'vat': vat, 'total': subtotal + vat}


#product model
class Product:
    def __init__(self, id, barcode, name_en, name_ar, price, category):
        self.id = id
        self.barcode = barcode
        self.name_en = name_en
        self.name_ar = name_ar
        self.price = price
        self.category = category

    def name(self, lang):
        return self.name_ar if lang == 'ar' else self.name_en

    def to_dict(self):
        return {
            'id': self.id,
            'barcode': self.barcode,
            'nameEn': self.name_en,
            'nameAr': self.name_ar,
            'price': self.price,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            str(data['id']),
            str(data['barcode']),
            data['nameEn'],
            data['nameAr'],
            float(data['price']),
            data.get('category') or '',
        )

    def __eq__(self, other):
        if not isinstance(other, Product):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Product(id={self.id!r}, barcode={self.barcode!r}, name_en={self.name_en!r}, price={self.price!r})"


#cart item model
class CartItem:
    def __init__(self, product, quantity=1):
        self.product = product
        self.quantity = quantity

    @property
    def id(self):
        return self.product.id

    @property
    def price(self):
        return self.product.price

    @property
    def line_total(self):
        return self.product.price * self.quantity

    def to_dict(self):
        # flat layout: product fields plus quantity
        data = self.product.to_dict()
        data['quantity'] = self.quantity
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(Product.from_dict(data), int(data['quantity']))


#cart model
class Cart:
    def __init__(self):
        self.items = []

    def _find(self, product_id):
        for item in self.items:
            if item.product.id == product_id:
                return item
        return None

    def add(self, product):
        item = self._find(product.id)
        if item is not None:
            item.quantity += 1
            return
        self.items.append(CartItem(product, 1))

    def remove(self, product_id):
        self.items = [item for item in self.items if item.product.id != product_id]

    def set_quantity_delta(self, product_id, delta):
        # never below 1; removal goes through remove()
        item = self._find(product_id)
        if item is None:
            return
        item.quantity = max(1, item.quantity + delta)

    def clear(self):
        self.items = []

    def is_empty(self):
        return not self.items

    def compute_totals(self, tax_rate=TAX_RATE):
        return compute_totals(self.items, tax_rate)

    def snapshot(self):
        return tuple(copy.deepcopy(item) for item in self.items)


#transaction model
class Transaction:
    """A completed sale. Items are deep copies taken at checkout."""

    def __init__(self, id, date, items, subtotal, vat, total):
        self.id = id
        self.date = date
        self.items = tuple(items)
        self.subtotal = subtotal
        self.vat = vat
        self.total = total

    def recompute_totals(self, tax_rate=TAX_RATE):
        return compute_totals(self.items, tax_rate)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date,
            'items': [item.to_dict() for item in self.items],
            'subtotal': self.subtotal,
            'vat': self.vat,
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            str(data['id']),
            data['date'],
            [CartItem.from_dict(it) for it in data['items']],
            float(data['subtotal']),
            float(data['vat']),
            float(data['total']),
        )

    def __repr__(self):
        return f"Transaction(id={self.id!r}, date={self.date!r}, total={self.total!r})"
