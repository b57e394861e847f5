"""Dark theme and fixed series colours for the monitor window."""

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

GRAPH_STYLE = "#b0b0b0"
AVG_CPU_STYLE = "#ffffff"
RAM_STYLE = "#ffd54f"
SWAP_STYLE = "#ab47bc"
RX_STYLE = "#ff5252"
TX_STYLE = "#2962ff"

# Qualitative palette cycled through per-core series
CPU_COLOURS = [
    "#e53935", "#8e24aa", "#3949ab", "#1e88e5",
    "#00897b", "#43a047", "#fdd835", "#fb8c00",
    "#6d4c41", "#546e7a", "#d81b60", "#00acc1",
]


def apply_dark_theme(app: QApplication) -> None:
    """Apply the dark Fusion palette and the window stylesheet."""
    app.setStyle("Fusion")
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(18, 18, 18))
    palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
    palette.setColor(QPalette.Base, QColor(24, 24, 24))
    palette.setColor(QPalette.AlternateBase, QColor(30, 30, 30))
    palette.setColor(QPalette.Text, QColor(224, 224, 224))
    palette.setColor(QPalette.Button, QColor(30, 30, 30))
    palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
    palette.setColor(QPalette.Highlight, QColor(53, 132, 228))
    palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
    app.setPalette(palette)
    app.setStyleSheet(
        f"""
        QWidget {{ background-color: #121212; color: #e0e0e0; }}
        QMainWindow {{ background-color: #0d0d0d; }}

        QLabel#GraphLegend {{
            color: {GRAPH_STYLE};
            font-family: monospace;
            font-size: 9pt;
        }}
        QLabel#FrozenBanner {{
            color: #ff9800;
            font-weight: 600;
        }}

        QTabWidget::pane {{
            border: 1px solid #2a2a2a;
            background-color: #141414;
            top: -1px;
        }}
        QTabBar::tab {{
            background: #1a1a1a;
            padding: 8px 16px;
            border: 1px solid #2a2a2a;
            border-bottom: none;
            border-top-left-radius: 6px;
            border-top-right-radius: 6px;
            margin-right: 2px;
        }}
        QTabBar::tab:selected {{
            background: #2a2a2a;
            border-bottom: 2px solid #3584e4;
        }}

        QTableWidget {{
            background-color: #1a1a1a;
            alternate-background-color: #1e1e1e;
            gridline-color: #2a2a2a;
            selection-background-color: #3584e4;
        }}
        QHeaderView::section {{
            background-color: #252525;
            color: {GRAPH_STYLE};
            padding: 6px;
            border: 1px solid #2a2a2a;
            font-weight: 600;
        }}
        """
    )
