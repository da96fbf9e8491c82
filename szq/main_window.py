# szq/main_window.py
import logging
from pathlib import Path

from PySide6.QtCore import Qt, QThread, QTimer
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QHBoxLayout, QPushButton, QSplitter,
    QTextEdit, QListWidgetItem, QProgressBar, QFileDialog, QComboBox, QDialog, QAbstractItemView
)

from .utils.settings import load_settings, save_settings, clamp_threads
from .utils.paths import existing_folders, make_jobs
from .models.events import BatchFinished, JobFinished, LogLine, ProgressUpdate
from .workers.sink import EventSink
from .workers.qt_bridge import BatchWorker
from .widgets.folder_list import FolderList
from .dialogs.prefs import PrefsDialog

log = logging.getLogger(__name__)

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Seven Zip Compressor")
        self.resize(640, 720)
        self.settings = load_settings()
        self.running = False
        self._close_when_done = False

        self.queue_label = QLabel("0 folders")
        self.queue_label.setStyleSheet("font-weight:600;")

        self.folders = FolderList()
        self.folders.pathsDropped.connect(self._add_paths)

        self.console = QTextEdit(); self.console.setReadOnly(True)
        self.console.setPlaceholderText("7-Zip output will appear here…")

        self.v_split = QSplitter(Qt.Vertical)
        self.v_split.addWidget(self.folders)
        self.v_split.addWidget(self.console)
        self.v_split.setSizes([300, 300])

        self.progress = QProgressBar(); self.progress.setRange(0, 100); self.progress.setTextVisible(True)

        self.thread_combo = QComboBox()
        self._fill_thread_combo()

        self.btn_add = QPushButton("Add Folders…"); self.btn_add.clicked.connect(self.add_folders)
        self.btn_remove = QPushButton("Remove Selected"); self.btn_remove.clicked.connect(self.remove_selected)
        self.btn_compress = QPushButton("Compress"); self.btn_compress.clicked.connect(self.start_batch)
        self.btn_cancel = QPushButton("Cancel"); self.btn_cancel.setEnabled(False); self.btn_cancel.clicked.connect(self.cancel_batch)

        top = QHBoxLayout()
        for b in (self.btn_add, self.btn_remove): top.addWidget(b)
        top.addStretch(); top.addWidget(QLabel("Number of threads:")); top.addWidget(self.thread_combo)

        bottom = QHBoxLayout()
        bottom.addStretch(); bottom.addWidget(self.btn_compress); bottom.addWidget(self.btn_cancel)

        central = QWidget(); v = QVBoxLayout(central)
        v.addWidget(self.queue_label); v.addLayout(top); v.addWidget(self.v_split)
        v.addWidget(self.progress); v.addLayout(bottom)
        self.setCentralWidget(central)

        m = self.menuBar().addMenu("&Options")
        act_prefs = QAction("Preferences…", self); act_prefs.triggered.connect(self.open_prefs); m.addAction(act_prefs)

        # Core pushes events into the sink; the window polls it from the GUI thread
        self.sink = EventSink()
        self.drain_timer = QTimer(self); self.drain_timer.setInterval(100)
        self.drain_timer.timeout.connect(self._drain_events)
        self.drain_timer.start()

        self.worker = BatchWorker(self.settings, self.sink)
        self.work_thread = QThread(self); self.worker.moveToThread(self.work_thread)
        self.work_thread.started.connect(self.worker.run)
        self.worker.finished.connect(self.work_thread.quit)

        self._restore_layout()
        self._refresh_queue_label()

    def _fill_thread_combo(self):
        self.thread_combo.clear()
        for i in range(1, int(self.settings["max_threads"]) + 1):
            self.thread_combo.addItem(str(i), i)
        default = clamp_threads(self.settings.get("default_threads", 2), self.settings)
        self.thread_combo.setCurrentIndex(default - 1)

    def _restore_layout(self):
        if vs := self.settings.get("v_split_sizes"): self.v_split.setSizes([int(x) for x in vs])

    def _save_layout(self):
        self.settings["v_split_sizes"] = self.v_split.sizes()
        self.settings["default_threads"] = self.thread_combo.currentData()
        save_settings(self.settings)

    def closeEvent(self, e):
        if self.running:
            # Running 7-Zip processes are not killed; close once BatchFinished arrives
            self.worker.stop()
            self._close_when_done = True
            self.centralWidget().setEnabled(False)
            self.console.append(">>> Closing after running folders finish…")
            e.ignore()
            return
        if self.work_thread.isRunning(): self.work_thread.quit(); self.work_thread.wait()
        self._save_layout()
        super().closeEvent(e)

    def add_folders(self):
        dlg = QFileDialog(self, "Select folders to compress", self.settings.get("last_folder", str(Path.home())))
        dlg.setFileMode(QFileDialog.Directory)
        dlg.setOption(QFileDialog.ShowDirsOnly, True)
        # Native dialogs cannot multi-select directories
        dlg.setOption(QFileDialog.DontUseNativeDialog, True)
        for view in dlg.findChildren(QAbstractItemView):
            view.setSelectionMode(QAbstractItemView.ExtendedSelection)
        if dlg.exec() == QDialog.Accepted and (dirs := dlg.selectedFiles()):
            self.settings["last_folder"] = str(Path(dirs[0]).parent)
            self._add_paths(dirs)

    def _add_paths(self, paths):
        known = set(self.folders.folders())
        for pth in existing_folders(paths):
            if pth in known:
                continue
            item = QListWidgetItem(str(pth)); item.setData(Qt.UserRole, pth)
            self.folders.addItem(item); known.add(pth)
        self._refresh_queue_label()

    def remove_selected(self):
        for item in self.folders.selectedItems():
            self.folders.takeItem(self.folders.row(item))
        self._refresh_queue_label()

    def start_batch(self):
        if self.running: return
        selected = self.folders.selected_folders() or self.folders.folders()
        if not selected:
            self.console.append("Please add folders to compress.")
            return

        threads = clamp_threads(self.thread_combo.currentData() or 1, self.settings)
        jobs = make_jobs(selected, self.settings.get("archive_ext", "7z"))

        self.console.clear(); self.console.append(f"=== Compressing {len(jobs)} folder(s) ===")
        self.progress.setValue(0)
        self._set_ui_enabled(False)
        self.running = True

        self.worker.settings = self.settings
        self.worker.set_batch(jobs, threads)
        self._refresh_queue_label()
        self.work_thread.start()

    def cancel_batch(self):
        if self.running:
            self.worker.stop()
            self.console.append(">>> Cancel requested, running folders will finish…")

    def _drain_events(self):
        for ev in self.sink.drain(limit=500):
            if isinstance(ev, LogLine):
                self.console.append(f"[{ev.source}] {ev.text}" if ev.source else ev.text)
            elif isinstance(ev, ProgressUpdate):
                self.progress.setValue(max(self.progress.value(), ev.percent))
            elif isinstance(ev, JobFinished):
                self._mark_job(ev)
            elif isinstance(ev, BatchFinished):
                self._on_batch_finished(ev)

    def _mark_job(self, ev: JobFinished):
        for i in range(self.folders.count()):
            item = self.folders.item(i)
            if item.data(Qt.UserRole) == ev.job.source_path:
                item.setText(f"{ev.job.source_path}  [{ev.outcome}]")

    def _on_batch_finished(self, ev: BatchFinished):
        self.console.append(
            f"=== {'Canceled' if ev.canceled else 'Finished'}: {ev.succeeded} succeeded, {ev.failed} failed ===")
        self.running = False
        self._set_ui_enabled(True)
        # Compressed folders are gone from disk; drop them from the list
        for i in reversed(range(self.folders.count())):
            if not Path(self.folders.item(i).data(Qt.UserRole)).exists():
                self.folders.takeItem(i)
        self._refresh_queue_label()
        if self._close_when_done:
            self.close()

    def _set_ui_enabled(self, enabled: bool):
        for w in (self.btn_add, self.btn_remove, self.btn_compress, self.thread_combo, self.folders):
            w.setEnabled(enabled)
        self.btn_cancel.setEnabled(not enabled)
        self.setCursor(Qt.ArrowCursor if enabled else Qt.BusyCursor)

    def _refresh_queue_label(self):
        n = self.folders.count()
        state = " • compressing…" if self.running else ""
        self.queue_label.setText(f"{n} folder{'s' if n != 1 else ''}{state}")

    def open_prefs(self):
        dlg = PrefsDialog(self.settings, self)
        if dlg.exec() == QDialog.Accepted:
            self.settings.update(dlg.get_values())
            save_settings(self.settings)
            self._fill_thread_combo()
            self.console.append("Saved preferences.")
            log.info("preferences saved")
