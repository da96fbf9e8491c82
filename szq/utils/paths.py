import os
from pathlib import Path
from typing import Iterable

from ..models.job import Job


def archive_path_for(folder: Path, ext: str = "7z") -> Path:
    """Sibling archive for a folder: /data/photos -> /data/photos.7z"""
    folder = Path(folder)
    return folder.parent / f"{folder.name}.{ext.lstrip('.')}"


def make_job(folder, ext: str = "7z") -> Job:
    src = Path(folder)
    return Job(source_path=src, output_path=archive_path_for(src, ext))


def make_jobs(folders: Iterable, ext: str = "7z") -> list[Job]:
    # Duplicates are passed through as-is; callers are expected not to repeat a folder.
    return [make_job(f, ext) for f in folders]


def existing_folders(paths: Iterable) -> list[Path]:
    out = []
    for p in paths:
        if (pth := Path(p)).is_dir():
            out.append(pth)
    return out


def delete_tree(folder: Path) -> list[str]:
    """
    Delete a folder recursively, files before the directory that holds them.

    Errors are collected and returned instead of raised; deletion keeps going
    past a file it cannot remove, and the parent directories of that file
    are then reported as not empty.
    """
    folder = Path(folder)
    errors: list[str] = []
    if not folder.is_dir():
        return [f"{folder}: not a directory"]

    def _onerror(e: OSError):
        errors.append(f"{e.filename}: {e.strerror or e}")

    for root, dirs, files in os.walk(folder, topdown=False, onerror=_onerror):
        for name in files:
            p = os.path.join(root, name)
            try:
                os.remove(p)
            except OSError as e:
                errors.append(f"{p}: {e.strerror or e}")
        for name in dirs:
            p = os.path.join(root, name)
            try:
                if os.path.islink(p):
                    os.remove(p)
                else:
                    os.rmdir(p)
            except OSError as e:
                errors.append(f"{p}: {e.strerror or e}")
    try:
        os.rmdir(folder)
    except OSError as e:
        errors.append(f"{folder}: {e.strerror or e}")
    return errors
