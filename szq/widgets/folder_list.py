# szq/widgets/folder_list.py
from pathlib import Path
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QAbstractItemView, QListWidget

class FolderList(QListWidget):
    pathsDropped = Signal(list)  # list[str]

    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.setAcceptDrops(True)
        self.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setUniformItemSizes(True)

    def dragEnterEvent(self, event):
        """Accept the drag action if it contains file URLs."""
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragEnterEvent(event)

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragMoveEvent(event)

    def dropEvent(self, event):
        """Only local directories are taken; files and URLs are ignored."""
        if event.mimeData().hasUrls():
            paths = []
            for url in event.mimeData().urls():
                if url.isLocalFile():
                    p = Path(url.toLocalFile())
                    if p.is_dir(): paths.append(str(p))
            if paths:
                self.pathsDropped.emit(paths)
            event.acceptProposedAction()
            return
        super().dropEvent(event)

    def folders(self) -> list[Path]:
        return [self.item(i).data(Qt.UserRole) for i in range(self.count())]

    def selected_folders(self) -> list[Path]:
        return [it.data(Qt.UserRole) for it in self.selectedItems()]
