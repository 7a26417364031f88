import logging
import os
import re

import arabic_reshaper
import qrcode
from bidi.algorithm import get_display
from PIL import Image, ImageDraw, ImageFont

from constants import STORE_NAME, TAX_NUMBER, tr
from transactions import parse_timestamp

logger = logging.getLogger(__name__)

_ARABIC = re.compile(r'[\u0600-\u06FF\u0750-\u077F]')


def shape_text(text):
    """Return `text` in visual order with Arabic letters joined.

    Pillow's basic layout draws code points one by one, left to right, so
    Arabic has to be reshaped to presentation forms and reordered first.
    Strings without Arabic are returned unchanged.
    """
    text = str(text or '')
    if not _ARABIC.search(text):
        return text
    return get_display(arabic_reshaper.reshape(text))


def build_invoice(transaction, lang='en', tz=None):
    """Render-ready invoice for one transaction.

    Pure: everything comes from the transaction record and the store
    constants, so old sales reprint exactly as sold.
    """
    issued = parse_timestamp(transaction.date).astimezone(tz)
    lines = []
    for item in transaction.items:
        lines.append({
            'name': item.product.name(lang),
            'quantity': item.quantity,
            'unit_price': item.price,
            'line_total': item.line_total,
        })

    return {
        'transaction_id': transaction.id,
        'lang': lang,
        'direction': 'rtl' if lang == 'ar' else 'ltr',
        'store_name': STORE_NAME['ar'] if lang == 'ar' else STORE_NAME['en'],
        'title': tr('invoice', lang),
        'tax_label': tr('taxNo', lang),
        'tax_number': TAX_NUMBER,
        'date': issued.strftime('%Y-%m-%d %H:%M'),
        'reference': transaction.id[-8:],
        'barcode_text': transaction.id[-6:].upper(),
        'lines': lines,
        'subtotal': transaction.subtotal,
        'vat': transaction.vat,
        'total': transaction.total,
        'currency': tr('currency', lang),
        'labels': {
            'item': tr('item', lang),
            'qty': tr('qty', lang),
            'price': tr('price', lang),
            'total': tr('total', lang),
            'subtotal': tr('subtotal', lang),
            'vat': tr('vat', lang),
            'date': tr('date', lang),
            'thank_you': tr('thankYou', lang),
        },
    }


class ReceiptGenerator:
    @staticmethod
    def _load_font(size):
        # Try common system fonts, fallback to Pillow's bundled font
        candidates = ["DejaVuSans.ttf", "arial.ttf", "LiberationSans-Regular.ttf"]
        for f in candidates:
            try:
                # text is shaped by shape_text(); raqm would shape it a second time
                return ImageFont.truetype(f, size, layout_engine=ImageFont.Layout.BASIC)
            except OSError:
                continue
        return ImageFont.load_default(size)

    @staticmethod
    def _text_size(draw, text, font):
        # measures logical text, the way it will be drawn
        bbox = draw.textbbox((0, 0), shape_text(text), font=font)
        return (bbox[2] - bbox[0], bbox[3] - bbox[1])

    @staticmethod
    def _wrap_text(draw, text, font, max_w):
        words = (text or '').split()
        if not words:
            return ['']
        lines = []
        cur = words[0]
        for w in words[1:]:
            tw, _ = ReceiptGenerator._text_size(draw, cur + ' ' + w, font)
            if tw <= max_w:
                cur = cur + ' ' + w
            else:
                lines.append(cur)
                cur = w
        lines.append(cur)
        return lines

    @staticmethod
    def generate(invoice, receipts_dir=None):
        """Draw the invoice dict from `build_invoice` to a PNG and return its path."""
        if receipts_dir is None:
            receipts_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'receipts')
        os.makedirs(receipts_dir, exist_ok=True)
        png_path = os.path.join(receipts_dir, f"{invoice['transaction_id']}_{invoice['lang']}.png")

        text_size = ReceiptGenerator._text_size
        rtl = invoice['direction'] == 'rtl'
        labels = invoice['labels']
        currency = invoice['currency']

        width = 800
        header_h = 220
        line_h = 28
        footer_h = 200
        x = 40
        right_boundary = width - x
        col_total_right = right_boundary - 20
        col_price_right = col_total_right - 120
        col_qty_center = col_price_right - 60
        item_col_w = max(80, int(col_qty_center - x) - 40)

        f_head = ReceiptGenerator._load_font(28)
        f_sub = ReceiptGenerator._load_font(18)
        f_body = ReceiptGenerator._load_font(14)
        f_mono = ReceiptGenerator._load_font(13)

        # Measure wrapped item names first so the canvas height is exact
        tmp_draw = ImageDraw.Draw(Image.new('RGB', (1, 1)))
        prepared = []
        items_h = 0
        for line in invoice['lines']:
            wrapped = ReceiptGenerator._wrap_text(tmp_draw, line['name'], f_mono, item_col_w)
            items_h += len(wrapped) * line_h + 6
            prepared.append((wrapped, line))
        items_h = max(120, items_h + 20)
        height = header_h + items_h + footer_h

        img = Image.new('RGB', (width, height), color=(255, 255, 255))
        draw = ImageDraw.Draw(img)

        def put(xy, text, font, fill=(0, 0, 0)):
            draw.text(xy, shape_text(text), font=font, fill=fill)

        def left_or_right(text, font, y, fill=(0, 0, 0)):
            # header lines follow the invoice's reading direction
            if rtl:
                tw, _ = text_size(draw, text, font)
                put((right_boundary - 160 - tw, y), text, font=font, fill=fill)
            else:
                put((x, y), text, font=font, fill=fill)

        y = 30
        left_or_right(invoice['store_name'], f_head, y, fill=(20, 20, 20))
        y += 40
        left_or_right(invoice['title'], f_sub, y, fill=(60, 60, 60))
        y += 28
        left_or_right(f"{invoice['tax_label']}: {invoice['tax_number']}", f_body, y)
        y += 22
        left_or_right(f"{labels['date']}: {invoice['date']}", f_body, y, fill=(90, 90, 90))
        y += 22
        left_or_right(f"ID: {invoice['reference']}", f_body, y, fill=(120, 120, 120))

        # QR code of the transaction id, in the header corner opposite the text
        qr = qrcode.QRCode(box_size=4, border=2)
        qr.add_data(invoice['transaction_id'])
        qr.make(fit=True)
        qr_size = 140
        qr_img = qr.make_image(fill_color="black", back_color="white").convert('RGB')
        qr_img = qr_img.resize((qr_size, qr_size), Image.NEAREST)
        qr_x = x if rtl else width - qr_size - 20
        img.paste(qr_img, (qr_x, 30))

        y = header_h - 24
        draw.line((x, y, right_boundary, y), fill=(200, 200, 200), width=1)
        y += 10

        put((x, y), labels['item'], font=f_mono, fill=(0, 0, 0))
        tw, _ = text_size(draw, labels['qty'], f_mono)
        put((col_qty_center - tw / 2, y), labels['qty'], font=f_mono, fill=(0, 0, 0))
        tw, _ = text_size(draw, labels['price'], f_mono)
        put((col_price_right - tw, y), labels['price'], font=f_mono, fill=(0, 0, 0))
        tw, _ = text_size(draw, labels['total'], f_mono)
        put((col_total_right - tw, y), labels['total'], font=f_mono, fill=(0, 0, 0))
        y += 20
        draw.line((x, y, right_boundary, y), fill=(40, 40, 40), width=2)
        y += 8

        for wrapped, line in prepared:
            qty = str(line['quantity'])
            price = f"{line['unit_price']:.2f}"
            total = f"{line['line_total']:.2f}"
            for i, part in enumerate(wrapped):
                put((x, y), part, font=f_mono, fill=(20, 20, 20))
                if i == 0:
                    qw, _ = text_size(draw, qty, f_mono)
                    put((col_qty_center - qw / 2, y), qty, font=f_mono, fill=(20, 20, 20))
                    pw, _ = text_size(draw, price, f_mono)
                    put((col_price_right - pw, y), price, font=f_mono, fill=(20, 20, 20))
                    tw, _ = text_size(draw, total, f_mono)
                    put((col_total_right - tw, y), total, font=f_mono, fill=(20, 20, 20))
                y += line_h
            draw.line((x, y, right_boundary, y), fill=(225, 225, 225), width=1)
            y += 6

        y = header_h + items_h
        rows = [
            (f"{labels['subtotal']}: {invoice['subtotal']:,.2f} {currency}", f_body, (0, 0, 0)),
            (f"{labels['vat']}: {invoice['vat']:,.2f} {currency}", f_body, (90, 90, 90)),
            (f"{labels['total']}: {invoice['total']:,.2f} {currency}", f_sub, (0, 100, 0)),
        ]
        for text, font, fill in rows:
            tw, _ = text_size(draw, text, font)
            put((col_total_right - tw, y), text, font=font, fill=fill)
            y += line_h + 2

        y += 16
        draw.line((x, y, right_boundary, y), fill=(200, 200, 200), width=1)
        y += 14
        tw, _ = text_size(draw, labels['thank_you'], f_sub)
        put(((width - tw) / 2, y), labels['thank_you'], font=f_sub, fill=(80, 80, 80))
        y += 34
        strip = f"||| || ||| || {invoice['barcode_text']} || |||"
        draw.rectangle((x, y, right_boundary, y + 40), fill=(230, 230, 230))
        tw, th = text_size(draw, strip, f_mono)
        put(((width - tw) / 2, y + (40 - th) / 2), strip, font=f_mono, fill=(0, 0, 0))

        img.save(png_path)
        logger.info("Receipt image written to %s", png_path)
        return png_path
