# szq/dialogs/prefs.py
from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QLabel,
    QLineEdit, QPushButton, QSpinBox, QComboBox, QFileDialog, QVBoxLayout
)

class PrefsDialog(QDialog):
    def __init__(self, settings: dict, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.settings = settings
        self.setMinimumWidth(560)

        self.exe_edit = QLineEdit(self.settings["sevenzip_path"])
        btn_browse_exe = QPushButton("Browse…"); btn_browse_exe.clicked.connect(self._browse_exe)
        exe_hint = QLabel("(7z, 7za or 7zG.exe; a bare name is looked up on PATH)")

        self.ext_combo = QComboBox(); self.ext_combo.addItems(["7z", "zip", "tar", "xz"])
        self.ext_combo.setCurrentText(self.settings.get("archive_ext", "7z"))

        self.level_spin = QSpinBox(); self.level_spin.setRange(0, 9)
        self.level_spin.setValue(int(self.settings.get("compression_level", 9)))
        self.level_spin.setPrefix("-mx=")

        self.max_spin = QSpinBox(); self.max_spin.setRange(1, 64)
        self.max_spin.setValue(int(self.settings.get("max_threads", 10)))

        self.extra_args = QLineEdit(self.settings.get("extra_args", ""))
        self.extra_args.setPlaceholderText("advanced: e.g. -mmt=2 -ms=on")

        form = QFormLayout()
        row_exe = QHBoxLayout(); row_exe.addWidget(self.exe_edit); row_exe.addWidget(btn_browse_exe)
        form.addRow("7-Zip executable:", row_exe); form.addRow("", exe_hint)
        form.addRow("Archive type:", self.ext_combo)
        form.addRow("Compression level:", self.level_spin)
        form.addRow("Max threads:", self.max_spin)
        form.addRow("Extra 7z args:", self.extra_args)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept); buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self); layout.addLayout(form); layout.addWidget(buttons)

    def _browse_exe(self):
        f, _ = QFileDialog.getOpenFileName(self, "Locate 7-Zip", self.exe_edit.text() or "/usr/bin", "All (*)")
        if f: self.exe_edit.setText(f)

    def get_values(self) -> dict:
        max_threads = int(self.max_spin.value())
        return {
            "sevenzip_path": self.exe_edit.text().strip() or "7z",
            "archive_ext": self.ext_combo.currentText(),
            "compression_level": int(self.level_spin.value()),
            "max_threads": max_threads,
            "default_threads": min(int(self.settings.get("default_threads", 2)), max_threads),
            "extra_args": self.extra_args.text().strip(),
        }
