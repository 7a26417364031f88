from PyQt5.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QMessageBox
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
import matplotlib.pyplot as plt
import logging

from constants import DAILY_SERIES_DAYS, tr

logger = logging.getLogger(__name__)


class _KpiCard(QFrame):
    def __init__(self):
        super().__init__()
        self.setObjectName("KpiCard")
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout()
        self.lbl_title = QLabel()
        self.lbl_title.setStyleSheet("color: #7F8C8D;")
        self.lbl_value = QLabel()
        self.lbl_value.setStyleSheet("font-size: 22pt; font-weight: bold;")
        layout.addWidget(self.lbl_title)
        layout.addWidget(self.lbl_value)
        self.setLayout(layout)

    def set_values(self, title, value):
        self.lbl_title.setText(title)
        self.lbl_value.setText(value)


class VizPanel(QWidget):
    """Sales report: total revenue, transaction count and a daily sales bar chart.

    Reads everything from the ReportService it is given; refresh_charts()
    recomputes on demand.
    """

    def __init__(self, reports, lang='en'):
        super().__init__()
        self.reports = reports
        self.lang = lang
        layout = QVBoxLayout()

        self.lbl_title = QLabel()
        self.lbl_title.setStyleSheet("font-size: 20pt; font-weight: bold;")

        cards = QHBoxLayout()
        self.card_revenue = _KpiCard()
        self.card_count = _KpiCard()
        cards.addWidget(self.card_revenue)
        cards.addWidget(self.card_count)
        cards.addStretch()

        self.chart = FigureCanvas(plt.Figure(figsize=(6, 3)))

        layout.addWidget(self.lbl_title)
        layout.addLayout(cards)
        layout.addWidget(self.chart, 1)
        self.setLayout(layout)

    def set_language(self, lang):
        self.lang = lang
        self.refresh_charts()

    def refresh_charts(self):
        lang = self.lang
        try:
            summary = self.reports.summary(DAILY_SERIES_DAYS)
        except Exception as e:
            logger.exception("Could not compute sales report")
            QMessageBox.warning(self, 'Data Error', f'Could not load report data:\n{e}')
            return

        currency = tr('currency', lang)
        self.lbl_title.setText(tr('reports', lang))
        self.card_revenue.set_values(tr('totalRevenue', lang), f"{summary['total_revenue']:,.2f} {currency}")
        self.card_count.set_values(tr('totalTransactions', lang), str(summary['total_transactions']))

        series = summary['daily_series']
        days = [p['date'] for p in series]
        amounts = [p['amount'] for p in series]

        fig = self.chart.figure
        fig.clear()
        ax = fig.add_subplot(111)
        if days:
            ax.bar(days, amounts, color='#10b981', width=0.5)
            # matplotlib does not shape Arabic; chart text stays English
            ax.set_title(tr('dailySales', 'en'))
            ax.set_ylabel(tr('currency', 'en'))
            ax.grid(axis='y', linestyle='--', alpha=0.4)
            ax.tick_params(axis='x', rotation=30)
        else:
            ax.text(0.5, 0.5, tr('noSales', 'en'), ha='center', va='center')
            ax.axis('off')
        fig.tight_layout()
        self.chart.draw()
