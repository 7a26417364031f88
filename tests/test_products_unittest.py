import os
import tempfile
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from constants import INITIAL_PRODUCTS, PRODUCTS_KEY
from database import DatabaseManager, LocalStore
from models import Product
from products import (
    CatalogStore,
    ProductNotFoundError,
    ProductValidationError,
    validate_product_form,
)


class CatalogTests(unittest.TestCase):
    def setUp(self):
        tf = tempfile.NamedTemporaryFile(delete=False)
        tf.close()
        self.db_path = tf.name
        self.store = LocalStore(DatabaseManager(db_name=self.db_path))
        self.catalog = CatalogStore(self.store)

    def tearDown(self):
        for suffix in ('', '-wal', '-shm'):
            try:
                os.unlink(self.db_path + suffix)
            except OSError:
                pass

    def reopen(self):
        return CatalogStore(LocalStore(DatabaseManager(db_name=self.db_path)))

    def test_seed_catalog_when_store_is_empty(self):
        products = self.catalog.list_products()
        self.assertEqual(len(products), len(INITIAL_PRODUCTS))
        self.assertEqual(self.catalog.get_product_by_barcode('123456').name_en, 'Apple')

    def test_malformed_catalog_falls_back_to_seed(self):
        self.store.write(PRODUCTS_KEY, [{'unexpected': True}])
        catalog = self.reopen()
        self.assertEqual(len(catalog.list_products()), len(INITIAL_PRODUCTS))

    def test_add_persists(self):
        p = Product('99', '999999', 'Tea', 'شاي', 12.0, 'Beverages')
        self.catalog.add_product(p)
        reloaded = self.reopen()
        self.assertEqual(reloaded.get_product('99'), p)
        self.assertEqual(len(reloaded.list_products()), len(INITIAL_PRODUCTS) + 1)

    def test_update_replaces_only_matching_product(self):
        before = {p.id: p for p in self.catalog.list_products()}
        edited = Product('3', '345678', 'Milk 2L', 'حليب 2 لتر', 11.0, 'Dairy')
        self.catalog.update_product(edited)

        reloaded = self.reopen()
        for p in reloaded.list_products():
            if p.id == '3':
                self.assertEqual(p, edited)
            else:
                self.assertEqual(p, before[p.id])
        # order is kept
        self.assertEqual([p.id for p in reloaded.list_products()], list(before))

    def test_update_unknown_product_raises(self):
        ghost = Product('nope', '000', 'Ghost', 'شبح', 1.0, 'General')
        with self.assertRaises(ProductNotFoundError):
            self.catalog.update_product(ghost)
        self.assertIsNone(self.catalog.get_product('nope'))

    def test_delete(self):
        self.assertTrue(self.catalog.delete_product('2'))
        self.assertFalse(self.catalog.delete_product('2'))
        self.assertIsNone(self.reopen().get_product('2'))

    def test_search_empty_returns_everything(self):
        self.assertEqual(len(self.catalog.search('')), len(INITIAL_PRODUCTS))

    def test_search_english_is_case_insensitive(self):
        self.assertEqual([p.id for p in self.catalog.search('aPPle')], ['1'])
        self.assertEqual([p.id for p in self.catalog.search('MILK')], ['3'])

    def test_search_arabic_and_barcode(self):
        self.assertEqual([p.id for p in self.catalog.search('خبز')], ['4'])
        self.assertEqual([p.id for p in self.catalog.search('7890')], ['2', '5'])

    def test_search_no_match(self):
        self.assertEqual(self.catalog.search('zzz'), [])


class ValidationTests(unittest.TestCase):
    def setUp(self):
        tf = tempfile.NamedTemporaryFile(delete=False)
        tf.close()
        self.db_path = tf.name
        self.catalog = CatalogStore(LocalStore(DatabaseManager(db_name=self.db_path)))

    def tearDown(self):
        for suffix in ('', '-wal', '-shm'):
            try:
                os.unlink(self.db_path + suffix)
            except OSError:
                pass

    def form(self, **overrides):
        data = {'barcode': '111222', 'name_en': 'Tea', 'name_ar': 'شاي', 'price': '12.5', 'category': 'Beverages'}
        data.update(overrides)
        return data

    def test_valid_form_builds_product(self):
        p = validate_product_form(self.form(name_en='  Tea  '), catalog=self.catalog)
        self.assertEqual(p.name_en, 'Tea')
        self.assertEqual(p.price, 12.5)
        self.assertTrue(p.id)

    def test_missing_fields(self):
        with self.assertRaises(ProductValidationError) as ctx:
            validate_product_form(self.form(barcode=' ', name_en='', name_ar=''))
        self.assertEqual(set(ctx.exception.errors), {'barcode', 'name_en', 'name_ar'})

    def test_bad_prices(self):
        for bad in ('', 'abc', '-1', 'nan', 'inf'):
            with self.assertRaises(ProductValidationError) as ctx:
                validate_product_form(self.form(price=bad))
            self.assertIn('price', ctx.exception.errors)

    def test_zero_price_is_allowed(self):
        self.assertEqual(validate_product_form(self.form(price='0')).price, 0.0)

    def test_blank_category_defaults_to_general(self):
        self.assertEqual(validate_product_form(self.form(category='')).category, 'General')

    def test_unknown_category(self):
        with self.assertRaises(ProductValidationError) as ctx:
            validate_product_form(self.form(category='Weapons'))
        self.assertIn('category', ctx.exception.errors)

    def test_duplicate_barcode_rejected(self):
        with self.assertRaises(ProductValidationError) as ctx:
            validate_product_form(self.form(barcode='123456'), catalog=self.catalog)
        self.assertIn('barcode', ctx.exception.errors)

    def test_editing_keeps_own_barcode(self):
        p = validate_product_form(self.form(barcode='123456'), product_id='1', catalog=self.catalog)
        self.assertEqual(p.id, '1')


if __name__ == '__main__':
    unittest.main()
