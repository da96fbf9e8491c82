# szq/utils/settings.py
import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

# Top directory = folder that contains the `szq/` package
def _top_dir() -> Path:
    # This file is szq/utils/settings.py → parents[2] is the folder above szq/
    return Path(__file__).resolve().parents[2]

APP_SETTINGS_FILE = _top_dir() / "szq_settings.json"

DEFAULT_SETTINGS = {
    "sevenzip_path": "7z",             # 7z / 7za / 7zG.exe, or a full path
    "archive_ext": "7z",
    "compression_level": 9,            # -mx=9 (ultra)
    "extra_args": "",

    # Worker pool
    "max_threads": 10,
    "default_threads": 2,

    "last_folder": str(Path.home()),
    # layout persistence:
    # "v_split_sizes": [...],
}

def load_settings(path: Path | None = None) -> dict:
    p = Path(path) if path else APP_SETTINGS_FILE
    if p.exists():
        try:
            data = json.loads(p.read_text())
            return {**DEFAULT_SETTINGS, **data}
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", p, e)
    # First run or broken file → write defaults so the file exists
    try:
        p.write_text(json.dumps(DEFAULT_SETTINGS, indent=2))
    except OSError as e:
        log.warning("Could not write default settings to %s: %s", p, e)
    return DEFAULT_SETTINGS.copy()

def save_settings(data: dict, path: Path | None = None) -> None:
    p = Path(path) if path else APP_SETTINGS_FILE
    try:
        p.write_text(json.dumps(data, indent=2))
    except OSError as e:
        log.warning("Could not save settings to %s: %s", p, e)

def clamp_threads(requested: int, settings: dict) -> int:
    """Bound a requested worker count into 1..max_threads."""
    upper = max(1, int(settings.get("max_threads", DEFAULT_SETTINGS["max_threads"])))
    return max(1, min(upper, int(requested)))
