from __future__ import annotations

import json
import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from core.models.settings import DEFAULT_INVOICE_START_NUMBER, ShopSettings

logger = logging.getLogger(__name__)

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[2]
TEMPLATES_DIR = ROOT_DIR / "templates" / "pdf"
EXPORTS_DIR = ROOT_DIR / "exports"


def default_data_dir() -> Path:
    env = os.environ.get("POS_DATA_DIR")
    return Path(env) if env else ROOT_DIR / "data"


def _clean_path(p: str) -> str:
    """Corrige 'C\\:\\Program Files\\...' -> 'C:\\Program Files\\...' et normalise."""
    if not p:
        return ""
    p = p.strip().strip('"').strip("'")
    p = p.replace("\\:", ":")
    return os.path.normpath(p)


class SettingsService:
    """
    Paramètres boutique (data/settings.json).
    Fichier absent, illisible ou invalide -> valeurs par défaut (avec warning).
    """

    def __init__(self, data_dir: Optional[os.PathLike | str] = None) -> None:
        base = Path(data_dir) if data_dir else default_data_dir()
        base.mkdir(parents=True, exist_ok=True)
        self.path = base / "settings.json"
        self._lock = threading.Lock()

    def load(self) -> ShopSettings:
        if not self.path.exists():
            return ShopSettings()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable settings file %s (%s), using defaults", self.path, e)
            return ShopSettings()
        try:
            return ShopSettings.model_validate(raw or {})
        except ValidationError as e:
            logger.warning("Invalid settings in %s, using defaults:\n%s", self.path, e)
            return ShopSettings()

    def save(self, settings: ShopSettings) -> None:
        self.path.write_text(
            json.dumps(settings.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    # ----------- numérotation -----------

    def next_invoice_number(self) -> int:
        """Réserve le prochain numéro de facture et avance le compteur."""
        with self._lock:
            s = self.load()
            number = s.numbering.next_invoice_number
            s.numbering.next_invoice_number = number + 1
            self.save(s)
        return number

    def peek_invoice_number(self) -> int:
        return self.load().numbering.next_invoice_number

    def reset_invoice_number(self, start: int = DEFAULT_INVOICE_START_NUMBER) -> int:
        start = int(start)
        if start < 1:
            raise ValueError("Invoice number must be a positive integer")
        with self._lock:
            s = self.load()
            s.numbering.next_invoice_number = start
            self.save(s)
        logger.info("Invoice counter reset to %s", start)
        return start

    # ----------- PDF -----------

    def find_wkhtmltopdf(self) -> Optional[str]:
        """
        Localise wkhtmltopdf :
        - Variables d'env (WKHTMLTOPDF, WKHTMLTOPDF_PATH)
        - settings.json -> pdf.wkhtmltopdf_path
        - PATH
        """
        for env_key in ("WKHTMLTOPDF", "WKHTMLTOPDF_PATH"):
            val = os.environ.get(env_key)
            if val:
                path = _clean_path(val)
                if Path(path).is_file():
                    return path

        wk = self.load().pdf.wkhtmltopdf_path
        if wk:
            path = _clean_path(wk)
            if Path(path).is_file():
                return path

        found = shutil.which("wkhtmltopdf")
        return _clean_path(found) if found else None

    # ----------- évènement actif -----------

    def set_active_event(self, event_id: Optional[str]) -> None:
        with self._lock:
            s = self.load()
            s.active_event_id = event_id or None
            self.save(s)
