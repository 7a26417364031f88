#Store settings and UI strings shared by the terminal

TAX_RATE = 0.05
STORE_NAME = {'en': 'Al-Nujoom Supermarket', 'ar': 'سوبر ماركت النجوم'}
TAX_NUMBER = '123456789012345'

LANGUAGES = ('en', 'ar')
DEFAULT_LANGUAGE = 'en'

# Keys of the records kept in the local store
PRODUCTS_KEY = 'pos_products'
TRANSACTIONS_KEY = 'pos_transactions'
LANGUAGE_KEY = 'pos_lang'

# Number of most recent sale days plotted on the report chart
DAILY_SERIES_DAYS = 7

CATEGORIES = [
    'Fruits',
    'Vegetables',
    'Dairy',
    'Bakery',
    'Beverages',
    'Snacks',
    'Household',
    'General',
]
DEFAULT_CATEGORY = 'General'

# Seed catalog used until the first catalog edit is saved
INITIAL_PRODUCTS = [
    {'id': '1', 'barcode': '123456', 'nameEn': 'Apple', 'nameAr': 'تفاح', 'price': 5.50, 'category': 'Fruits'},
    {'id': '2', 'barcode': '789012', 'nameEn': 'Orange', 'nameAr': 'برتقال', 'price': 4.25, 'category': 'Fruits'},
    {'id': '3', 'barcode': '345678', 'nameEn': 'Milk 1L', 'nameAr': 'حليب 1 لتر', 'price': 7.00, 'category': 'Dairy'},
    {'id': '4', 'barcode': '901234', 'nameEn': 'Bread', 'nameAr': 'خبز', 'price': 3.50, 'category': 'Bakery'},
    {'id': '5', 'barcode': '567890', 'nameEn': 'Water 500ml', 'nameAr': 'ماء 500 مل', 'price': 1.50, 'category': 'Beverages'},
]

STRINGS = {
    'app_title': {'en': 'POS Pro', 'ar': 'نقاط البيع برو'},
    'pos': {'en': 'POS', 'ar': 'نقاط البيع'},
    'products': {'en': 'Products', 'ar': 'المنتجات'},
    'reports': {'en': 'Reports', 'ar': 'التقارير'},
    'searchPlaceholder': {'en': 'Scan barcode or search...', 'ar': 'امسح الباركود أو ابحث...'},
    'total': {'en': 'Total', 'ar': 'الإجمالي'},
    'subtotal': {'en': 'Subtotal', 'ar': 'المجموع الفرعي'},
    'vat': {'en': 'VAT (5%)', 'ar': 'الضريبة (5%)'},
    'checkout': {'en': 'Checkout & Print', 'ar': 'دفع وطباعة'},
    'clearCart': {'en': 'Clear', 'ar': 'مسح'},
    'emptyCart': {'en': 'Cart is empty', 'ar': 'السلة فارغة'},
    'price': {'en': 'Price', 'ar': 'السعر'},
    'qty': {'en': 'Qty', 'ar': 'الكمية'},
    'item': {'en': 'Item', 'ar': 'الصنف'},
    'addProduct': {'en': 'Add Product', 'ar': 'إضافة منتج'},
    'edit': {'en': 'Edit', 'ar': 'تعديل'},
    'delete': {'en': 'Delete', 'ar': 'حذف'},
    'save': {'en': 'Save', 'ar': 'حفظ'},
    'cancel': {'en': 'Cancel', 'ar': 'إلغاء'},
    'close': {'en': 'Close', 'ar': 'إغلاق'},
    'print': {'en': 'Print', 'ar': 'طباعة'},
    'nameEn': {'en': 'Name (English)', 'ar': 'الاسم (إنجليزي)'},
    'nameAr': {'en': 'Name (Arabic)', 'ar': 'الاسم (عربي)'},
    'barcode': {'en': 'Barcode', 'ar': 'الباركود'},
    'category': {'en': 'Category', 'ar': 'الفئة'},
    'actions': {'en': 'Actions', 'ar': 'الإجراءات'},
    'salesReport': {'en': 'Sales Report', 'ar': 'تقرير المبيعات'},
    'totalRevenue': {'en': 'Total Revenue', 'ar': 'إجمالي الإيرادات'},
    'totalTransactions': {'en': 'Total Transactions', 'ar': 'إجمالي المعاملات'},
    'date': {'en': 'Date', 'ar': 'التاريخ'},
    'invoice': {'en': 'INVOICE', 'ar': 'فاتورة ضريبية'},
    'taxNo': {'en': 'Tax No', 'ar': 'الرقم الضريبي'},
    'thankYou': {'en': 'Thank you for shopping!', 'ar': 'شكراً لتسوقكم معنا!'},
    'downloadData': {'en': 'Download Data', 'ar': 'تنزيل البيانات'},
    'confirmDelete': {'en': 'Are you sure?', 'ar': 'هل أنت متأكد؟'},
    'selectProduct': {'en': 'Select a product first', 'ar': 'اختر منتجاً أولاً'},
    'dailySales': {'en': 'Daily Sales', 'ar': 'المبيعات اليومية'},
    'noSales': {'en': 'No sales yet', 'ar': 'لا توجد مبيعات بعد'},
    'currency': {'en': 'AED', 'ar': 'درهم'},
    'language': {'en': 'العربية', 'ar': 'English'},
}


def tr(key, lang):
    """Look up a UI string; unknown keys are returned as-is."""
    entry = STRINGS.get(key)
    if not entry:
        return key
    return entry.get(lang) or entry.get(DEFAULT_LANGUAGE) or key
