import os
import json
import random
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from constants import TAX_RATE
from models import Cart, CartItem, Product, Transaction, compute_totals


def make_product(pid='1', price=5.50, name_en='Apple', name_ar='تفاح', barcode=None):
    return Product(pid, barcode or f'BC{pid}', name_en, name_ar, price, 'Fruits')


class CartTests(unittest.TestCase):
    def test_add_same_product_twice_merges_entry(self):
        cart = Cart()
        apple = make_product()
        cart.add(apple)
        cart.add(apple)
        self.assertEqual(len(cart.items), 1)
        self.assertEqual(cart.items[0].quantity, 2)

    def test_add_matches_on_identity_not_object(self):
        cart = Cart()
        cart.add(make_product('1'))
        cart.add(make_product('1'))
        cart.add(make_product('2'))
        self.assertEqual([i.id for i in cart.items], ['1', '2'])
        self.assertEqual(cart.items[0].quantity, 2)

    def test_remove_and_remove_missing(self):
        cart = Cart()
        cart.add(make_product('1'))
        cart.remove('missing')
        self.assertEqual(len(cart.items), 1)
        cart.remove('1')
        self.assertTrue(cart.is_empty())

    def test_quantity_delta_never_below_one(self):
        cart = Cart()
        cart.add(make_product('1'))
        cart.set_quantity_delta('1', 3)
        self.assertEqual(cart.items[0].quantity, 4)
        cart.set_quantity_delta('1', -10)
        self.assertEqual(cart.items[0].quantity, 1)
        # unknown ids are ignored
        cart.set_quantity_delta('nope', 5)
        self.assertEqual(len(cart.items), 1)

    def test_random_operations_keep_quantities_positive(self):
        rng = random.Random(42)
        products = [make_product(str(i), price=i + 0.25) for i in range(1, 6)]
        cart = Cart()
        for _ in range(500):
            op = rng.choice(['add', 'remove', 'delta'])
            p = rng.choice(products)
            if op == 'add':
                cart.add(p)
            elif op == 'remove':
                cart.remove(p.id)
            else:
                cart.set_quantity_delta(p.id, rng.randint(-5, 5))
            for item in cart.items:
                self.assertGreaterEqual(item.quantity, 1)
            ids = [i.id for i in cart.items]
            self.assertEqual(len(ids), len(set(ids)))

    def test_clear(self):
        cart = Cart()
        cart.add(make_product('1'))
        cart.add(make_product('2'))
        cart.clear()
        self.assertTrue(cart.is_empty())


class TotalsTests(unittest.TestCase):
    def test_single_apple_totals(self):
        cart = Cart()
        cart.add(make_product(price=5.50))
        totals = cart.compute_totals(0.05)
        self.assertAlmostEqual(totals['subtotal'], 5.50)
        self.assertAlmostEqual(totals['vat'], 0.275)
        self.assertAlmostEqual(totals['total'], 5.775)

    def test_totals_are_consistent(self):
        cart = Cart()
        cart.add(make_product('1', price=4.25))
        cart.add(make_product('2', price=7.00))
        cart.set_quantity_delta('1', 2)
        totals = cart.compute_totals()
        self.assertAlmostEqual(totals['subtotal'], 4.25 * 3 + 7.00)
        self.assertAlmostEqual(totals['vat'], totals['subtotal'] * TAX_RATE)
        self.assertAlmostEqual(totals['total'], totals['subtotal'] + totals['vat'])

    def test_no_rounding_during_accumulation(self):
        items = [CartItem(make_product(str(i), price=0.333), 1) for i in range(3)]
        totals = compute_totals(items, 0.05)
        self.assertAlmostEqual(totals['subtotal'], 0.999)
        self.assertAlmostEqual(totals['vat'], 0.04995)

    def test_empty_cart_totals_are_zero(self):
        self.assertEqual(Cart().compute_totals(), {'subtotal': 0, 'vat': 0.0, 'total': 0.0})


class SerializationTests(unittest.TestCase):
    def test_product_dict_uses_stable_field_names(self):
        data = make_product().to_dict()
        self.assertEqual(set(data), {'id', 'barcode', 'nameEn', 'nameAr', 'price', 'category'})
        self.assertEqual(Product.from_dict(data), make_product())

    def test_snapshot_is_deep_copy(self):
        cart = Cart()
        apple = make_product()
        cart.add(apple)
        snap = cart.snapshot()
        apple.name_en = 'Changed'
        apple.price = 99.0
        cart.set_quantity_delta('1', 4)
        self.assertEqual(snap[0].product.name_en, 'Apple')
        self.assertEqual(snap[0].price, 5.50)
        self.assertEqual(snap[0].quantity, 1)

    def test_transaction_round_trip_reproduces_totals(self):
        items = (CartItem(make_product('1', price=5.50), 3), CartItem(make_product('2', price=1.10), 7))
        totals = compute_totals(items)
        txn = Transaction('1700000000000', '2026-10-16T10:00:00+00:00', items,
                          totals['subtotal'], totals['vat'], totals['total'])

        restored = Transaction.from_dict(json.loads(json.dumps(txn.to_dict())))
        recomputed = restored.recompute_totals()
        self.assertAlmostEqual(recomputed['subtotal'], txn.subtotal)
        self.assertAlmostEqual(recomputed['vat'], txn.vat)
        self.assertAlmostEqual(recomputed['total'], txn.total)
        self.assertEqual(restored.items[1].product.name_ar, 'تفاح')
        self.assertEqual(restored.items[1].quantity, 7)

    def test_cart_item_dict_is_flat(self):
        data = CartItem(make_product(), 2).to_dict()
        self.assertEqual(data['quantity'], 2)
        self.assertEqual(data['nameEn'], 'Apple')


if __name__ == '__main__':
    unittest.main()
