from __future__ import annotations

import logging
import os
import sys
import time
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QThread, Signal, QTimer, QSize
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
    QLabel, QFileDialog, QSplitter, QLineEdit, QProgressBar, QMessageBox,
    QTableWidget, QTableWidgetItem, QTextEdit, QHeaderView, QAbstractItemView,
    QSpinBox, QComboBox, QCheckBox, QDialog, QDialogButtonBox
)

from . import report
from .drives import estimate_total_bytes, list_drives
from .errors import InvalidArgument
from .models import (
    AggregateStat, DEFAULT_COUNT, DEFAULT_GROUP, DEFAULT_SORT, GROUP_FIELDS, SORT_FIELDS
)
from .scanner import CancelFlag, scan
from .utils import format_bytes, format_count, truncate_path

logger = logging.getLogger(__name__)

APP_NAME = "diskusage"
PROGRESS_INTERVAL = 0.10
MAX_ERRORS_SHOWN = 500

# (label, report.process_results "only" value)
ONLY_CHOICES = [("All groups", None), ("Directories", "dirs"), ("Files", "files")]

DARK_QSS = r"""
* { font-size: 12px; }
QMainWindow { background: #0d111c; }
QWidget { color: #dbe6ff; }
QLineEdit, QTextEdit, QTableWidget, QSpinBox, QComboBox {
    background: #121826;
    border: 1px solid #25314a;
    border-radius: 8px;
    padding: 5px 7px;
    selection-background-color: rgba(47, 107, 255, 0.40);
}
QPushButton {
    background: #16203a;
    border: 1px solid #2a3a5a;
    border-radius: 10px;
    padding: 7px 12px;
}
QPushButton:hover { background: #1a2a4c; border-color: #3a5aa8; }
QPushButton:disabled { background: #141a28; color: #6a7894; border-color: #1d2433; }
QProgressBar {
    background: #0e1320;
    border: 1px solid #26334d;
    border-radius: 8px;
    text-align: center;
    height: 16px;
}
QProgressBar::chunk { background: #2f6bff; border-radius: 8px; }
QHeaderView::section {
    background: #0e1320;
    color: #9fb6ea;
    padding: 6px 8px;
    border: none;
}
QTableWidget { gridline-color: #1e2a40; alternate-background-color: #0f1526; }
"""


# -------------------- Worker thread --------------------
class ScanThread(QThread):
    progress = Signal(str, int, int, object)  # path, files, dirs, bytes (may exceed int32)
    entry_error = Signal(str)
    done = Signal(object, bool)               # Dict[str, AggregateStat], cancelled
    error = Signal(str)

    def __init__(self, path: str, group: str):
        super().__init__()
        self.path = path
        self.group = group
        self.cancel_flag = CancelFlag()

    def run(self):
        last_emit = 0.0

        def prog(cur: str, snapshot):
            nonlocal last_emit
            now = time.time()
            if now - last_emit < PROGRESS_INTERVAL:
                return
            last_emit = now
            files = dirs = size = 0
            for s in snapshot.values():
                files += s.files
                dirs += s.directories
                size += s.size
            self.progress.emit(cur, files, dirs, size)

        try:
            stats = scan(self.path, self.group, progress=prog,
                         on_error=self.entry_error.emit, cancel_flag=self.cancel_flag)
        except InvalidArgument as e:
            self.error.emit(e.message)
            return
        except Exception as e:
            logger.exception("scan of %s crashed", self.path)
            self.error.emit(str(e))
            return
        self.done.emit(stats, self.cancel_flag())


# -------------------- Dialogs --------------------
class DrivePicker(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Choose a drive")
        self.resize(640, 360)
        self.selected: Optional[str] = None

        v = QVBoxLayout(self)
        v.addWidget(QLabel("Pick the mount point to scan."))

        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Drive", "Type", "Total", "Used", "Free"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setStretchLastSection(True)
        _init_table(self.table)
        v.addWidget(self.table, 1)

        for d in list_drives():
            r = self.table.rowCount()
            self.table.insertRow(r)
            self.table.setItem(r, 0, QTableWidgetItem(d["mountpoint"]))
            self.table.setItem(r, 1, QTableWidgetItem(d["fstype"]))
            self.table.setItem(r, 2, QTableWidgetItem(format_bytes(d["total"])))
            self.table.setItem(r, 3, QTableWidgetItem(f'{format_bytes(d["used"])} ({d["percent"]:.0f}%)'))
            self.table.setItem(r, 4, QTableWidgetItem(format_bytes(d["free"])))
        self.table.cellDoubleClicked.connect(lambda *_: self.accept())

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)
        v.addWidget(btns)

    def accept(self):
        item = self.table.item(self.table.currentRow(), 0)
        if item is None:
            return
        self.selected = item.text()
        super().accept()


# -------------------- UI helpers --------------------
def _init_table(t: QTableWidget):
    t.verticalHeader().setVisible(False)
    t.setShowGrid(False)
    t.setAlternatingRowColors(True)
    t.setEditTriggers(QAbstractItemView.NoEditTriggers)
    t.setSelectionBehavior(QAbstractItemView.SelectRows)
    t.setSelectionMode(QAbstractItemView.SingleSelection)
    t.setVerticalScrollMode(QAbstractItemView.ScrollPerPixel)


def _num_item(text: str) -> QTableWidgetItem:
    it = QTableWidgetItem(text)
    it.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
    return it


class BusySpinner(QWidget):
    """Rotating dots shown while a scan runs."""
    def __init__(self, parent=None, radius: int = 8, line_len: int = 5):
        super().__init__(parent)
        self._angle = 0
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._radius = radius
        self._line_len = line_len
        side = (radius + line_len + 2) * 2
        self.setFixedSize(QSize(side, side))

    def start(self):
        if not self._timer.isActive():
            self._timer.start(40)

    def stop(self):
        self._timer.stop()
        self.update()

    def _tick(self):
        self._angle = (self._angle + 30) % 360
        self.update()

    def paintEvent(self, _ev):
        if not self._timer.isActive():
            return
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing, True)
        c = self.rect().center()
        for i in range(12):
            alpha = max(30, 255 - i * 20)
            p.setPen(QPen(QColor(47, 107, 255, alpha), 2, Qt.SolidLine, Qt.RoundCap))
            p.save()
            p.translate(c)
            p.rotate((self._angle + i * 30) % 360)
            p.drawLine(0, -self._radius, 0, -(self._radius + self._line_len))
            p.restore()


# -------------------- Main window --------------------
class MainWindow(QMainWindow):
    def __init__(self, path: Optional[str] = None):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} - disk usage by group")
        self.resize(1100, 720)

        self.scan_thread: Optional[ScanThread] = None
        self.current_stats: Dict[str, AggregateStat] = {}
        self.scanned_group: Optional[str] = None
        self.total_est_bytes = 1
        self.error_count = 0

        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        title = QLabel(APP_NAME)
        tf = QFont(); tf.setPointSize(15); tf.setBold(True)
        title.setFont(tf)
        root.addWidget(title)

        # ---------- Source
        src_row = QHBoxLayout()
        self.path_edit = QLineEdit(path or "")
        self.path_edit.setPlaceholderText("Folder or drive to scan…")
        btn_drive = QPushButton("Drive…")
        btn_folder = QPushButton("Folder…")
        self.btn_scan = QPushButton("Scan")
        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.setEnabled(False)
        src_row.addWidget(self.path_edit, 1)
        src_row.addWidget(btn_drive)
        src_row.addWidget(btn_folder)
        src_row.addSpacing(6)
        src_row.addWidget(self.btn_scan)
        src_row.addWidget(self.btn_cancel)
        root.addLayout(src_row)

        # ---------- Options
        opt_row = QHBoxLayout()
        self.group_box = QComboBox()
        self.group_box.addItems(list(GROUP_FIELDS))
        self.group_box.setCurrentText(DEFAULT_GROUP)
        self.sort_box = QComboBox()
        self.sort_box.addItems(list(SORT_FIELDS))
        self.sort_box.setCurrentText(DEFAULT_SORT)
        self.count_spin = QSpinBox()
        self.count_spin.setRange(0, 100000)
        self.count_spin.setValue(DEFAULT_COUNT)
        self.reverse_check = QCheckBox("Reverse")
        self.only_box = QComboBox()
        for label, _value in ONLY_CHOICES:
            self.only_box.addItem(label)

        for label, w in (("Group by", self.group_box), ("Sort by", self.sort_box),
                         ("Rows", self.count_spin), ("Show", self.only_box)):
            opt_row.addWidget(QLabel(label))
            opt_row.addWidget(w)
            opt_row.addSpacing(8)
        opt_row.addWidget(self.reverse_check)
        opt_row.addStretch(1)
        root.addLayout(opt_row)

        # ---------- Progress
        prog_row = QHBoxLayout()
        self.spinner = BusySpinner()
        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        self.scan_detail = QLabel("Ready.")
        self.scan_detail.setStyleSheet("QLabel{color:#8ea3d6;}")
        prog_row.addWidget(self.spinner)
        prog_row.addWidget(self.progress, 1)
        root.addLayout(prog_row)
        root.addWidget(self.scan_detail)

        # ---------- Results
        self.splitter = QSplitter(Qt.Horizontal)
        self.splitter.setChildrenCollapsible(False)
        root.addWidget(self.splitter, 1)

        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Group", "Files", "Directories", "Size", "Share"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        for col in range(1, 5):
            self.table.horizontalHeader().setSectionResizeMode(col, QHeaderView.ResizeToContents)
        _init_table(self.table)
        self.splitter.addWidget(self.table)

        side = QWidget()
        side_l = QVBoxLayout(side)
        side_l.setContentsMargins(0, 0, 0, 0)
        self.totals_box = QTextEdit()
        self.totals_box.setReadOnly(True)
        self.totals_box.setMaximumHeight(150)
        self.errors_label = QLabel("Unreadable entries")
        self.errors_box = QTextEdit()
        self.errors_box.setReadOnly(True)
        side_l.addWidget(QLabel("Totals"))
        side_l.addWidget(self.totals_box)
        side_l.addWidget(self.errors_label)
        side_l.addWidget(self.errors_box, 1)
        self.splitter.addWidget(side)
        self.splitter.setSizes([760, 340])

        btn_drive.clicked.connect(self.pick_drive)
        btn_folder.clicked.connect(self.pick_folder)
        self.btn_scan.clicked.connect(self.start_scan)
        self.btn_cancel.clicked.connect(self.cancel_scan)
        self.path_edit.returnPressed.connect(self.start_scan)
        self.sort_box.currentTextChanged.connect(lambda _=None: self.refresh_table())
        self.count_spin.valueChanged.connect(lambda _=None: self.refresh_table())
        self.reverse_check.stateChanged.connect(lambda _=None: self.refresh_table())
        self.only_box.currentIndexChanged.connect(lambda _=None: self.refresh_table())
        self.group_box.currentTextChanged.connect(self.on_group_changed)

        self.statusBar().showMessage("Pick a folder or drive and press Scan.")

    # ---------- Source selection
    def pick_drive(self):
        dlg = DrivePicker(self)
        if dlg.exec() == QDialog.Accepted and dlg.selected:
            self.path_edit.setText(dlg.selected)

    def pick_folder(self):
        path = QFileDialog.getExistingDirectory(self, "Choose a folder", self.path_edit.text() or os.path.expanduser("~"))
        if path:
            self.path_edit.setText(path)

    # ---------- Scan
    def start_scan(self):
        if self.scan_thread and self.scan_thread.isRunning():
            return
        path = self.path_edit.text().strip()
        if not path:
            QMessageBox.warning(self, "Source", "Choose a folder or drive first.")
            return

        self.total_est_bytes = estimate_total_bytes(path) or 1
        self.current_stats = {}
        self.error_count = 0
        self.errors_box.clear()
        self.errors_label.setText("Unreadable entries")
        self.table.setRowCount(0)
        self.totals_box.clear()
        self.progress.setValue(0)
        self.scan_detail.setText("Scanning…")

        group = self.group_box.currentText()
        self.scan_thread = ScanThread(path, group)
        self.scan_thread.progress.connect(self.on_scan_progress)
        self.scan_thread.entry_error.connect(self.on_entry_error)
        self.scan_thread.done.connect(self.on_scan_done)
        self.scan_thread.error.connect(self.on_scan_error)
        self.btn_scan.setEnabled(False)
        self.btn_cancel.setEnabled(True)
        self.spinner.start()
        self.scan_thread.start()
        self.statusBar().showMessage(f"Scanning {path} by {group}…")

    def cancel_scan(self):
        if self.scan_thread:
            self.scan_thread.cancel_flag.cancel()
            self.btn_cancel.setEnabled(False)
            self.statusBar().showMessage("Cancelling…")

    def _scan_finished(self):
        self.spinner.stop()
        self.btn_scan.setEnabled(True)
        self.btn_cancel.setEnabled(False)

    def on_scan_progress(self, cur: str, files: int, dirs: int, size):
        size = int(size or 0)
        pct = min(100, int(size * 100 / self.total_est_bytes))
        if pct > self.progress.value():
            self.progress.setValue(pct)
        self.scan_detail.setText(
            f"Files: {format_count(files)} | Directories: {format_count(dirs)} | "
            f"Size: {format_bytes(size)} | Now: {truncate_path(cur, 90)}"
        )

    def on_entry_error(self, message: str):
        self.error_count += 1
        self.errors_label.setText(f"Unreadable entries ({self.error_count})")
        if self.error_count <= MAX_ERRORS_SHOWN:
            self.errors_box.append(message)

    def on_scan_done(self, stats: Dict[str, AggregateStat], cancelled: bool):
        self._scan_finished()
        self.current_stats = stats
        self.scanned_group = self.scan_thread.group if self.scan_thread else None
        self.progress.setValue(self.progress.value() if cancelled else 100)
        state = "cancelled, partial results" if cancelled else "finished"
        self.scan_detail.setText(f"Scan {state}: {len(stats)} groups, {self.error_count} unreadable entries.")
        self.statusBar().showMessage(f"Scan {state}.")
        self.refresh_table()

    def on_scan_error(self, msg: str):
        self._scan_finished()
        self.progress.setValue(0)
        self.scan_detail.setText("Scan failed.")
        QMessageBox.critical(self, "Scan error", msg)
        self.statusBar().showMessage("Error.")

    def on_group_changed(self, group: str):
        if self.current_stats and group != self.scanned_group:
            self.statusBar().showMessage("Grouping changed: scan again to apply it.")

    # ---------- Report
    def refresh_table(self):
        stats = self.current_stats
        only = ONLY_CHOICES[self.only_box.currentIndex()][1]
        rows: List[AggregateStat] = report.process_results(
            stats,
            sort=self.sort_box.currentText(),
            count=self.count_spin.value(),
            reverse=self.reverse_check.isChecked(),
            only=only,
        )
        total_size = report.totals(stats, "size")

        self.table.setUpdatesEnabled(False)
        self.table.setRowCount(0)
        for stat in rows:
            r = self.table.rowCount()
            self.table.insertRow(r)
            g = QTableWidgetItem(stat.group)
            g.setToolTip(stat.group)
            if stat.is_directory:
                g.setForeground(QColor("#38d1c5"))
            self.table.setItem(r, 0, g)
            self.table.setItem(r, 1, _num_item(format_count(stat.files)))
            self.table.setItem(r, 2, _num_item(format_count(stat.directories)))
            self.table.setItem(r, 3, _num_item(format_bytes(stat.size)))

            pct = report.share(stat, total_size)
            bar = QProgressBar()
            bar.setRange(0, 100)
            bar.setValue(int(pct))
            bar.setFormat(f"{pct:.1f}%")
            bar.setFixedHeight(16)
            self.table.setCellWidget(r, 4, bar)
        self.table.setUpdatesEnabled(True)

        self.totals_box.setPlainText(
            f"Groups: {len(stats)} (showing {len(rows)})\n"
            f"Size: {format_bytes(total_size)}\n"
            f"Files: {format_count(report.totals(stats, 'files'))}\n"
            f"Directories: {format_count(report.totals(stats, 'directories'))}\n"
        )

    def closeEvent(self, ev):
        if self.scan_thread and self.scan_thread.isRunning():
            self.scan_thread.cancel_flag.cancel()
            self.scan_thread.wait()
        super().closeEvent(ev)


def run(path: Optional[str] = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(DARK_QSS)
    w = MainWindow(path)
    w.show()
    return app.exec()


def main():
    sys.exit(run(sys.argv[1] if len(sys.argv) > 1 else None))
