import sys
import os
import logging
from PyQt5.QtWidgets import QApplication

from controller import MainController
from database import DatabaseManager, LocalStore, DB_NAME
from products import CatalogStore
from transactions import Ledger
from services import SettingsService


def configure_logging():
    level = os.environ.get('POS_LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def build_state(db_name=DB_NAME):
    """Open the local store and load the catalog, ledger and settings from it."""
    store = LocalStore(DatabaseManager(db_name=db_name))
    return CatalogStore(store), Ledger(store), SettingsService(store)


def main():
    configure_logging()
    app = QApplication(sys.argv)

    # Load QSS if one ships next to this file
    qss_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets", "themes", "pos.qss")
    if os.path.exists(qss_path):
        with open(qss_path, 'r', encoding='utf-8') as fh:
            app.setStyleSheet(fh.read())

    catalog, ledger, settings = build_state()
    logging.getLogger(__name__).info(
        "Loaded %d product(s) and %d transaction(s)", len(catalog.list_products()), len(ledger))

    window = MainController(catalog, ledger, settings)
    window.show()

    sys.exit(app.exec_())

if __name__ == "__main__":
    main()
