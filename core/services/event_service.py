from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from core.models.event import Event
from core.services.settings_service import SettingsService, default_data_dir
from core.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)


class EventService:
    """
    Évènements (data/events.json). Chaque évènement a son dossier
    data/events/<id>/ avec products.json, invoices.json et vendors.json.
    Sans évènement actif, on travaille directement dans data/.
    Le compteur de factures reste commun (settings.json).
    """

    def __init__(
        self,
        data_dir: Optional[os.PathLike | str] = None,
        settings: Optional[SettingsService] = None,
    ) -> None:
        self.base = Path(data_dir) if data_dir else default_data_dir()
        self.base.mkdir(parents=True, exist_ok=True)
        self.settings = settings or SettingsService(self.base)
        self.repo = JsonRepository(self.base / "events.json", entity_name="event", key="id")

    def list_events(self) -> List[Event]:
        out: List[Event] = []
        for d in self.repo.list_all():
            try:
                out.append(Event.model_validate(d))
            except ValidationError:
                logger.warning("Skipping invalid event row %s", d.get("id"))
        # le plus récent d'abord
        return sorted(out, key=lambda e: e.created_at, reverse=True)

    def get_event(self, event_id: str) -> Optional[Event]:
        row = self.repo.get_by_id(event_id)
        if row is None:
            return None
        try:
            return Event.model_validate(row)
        except ValidationError:
            return None

    def create_event(self, name: str) -> Event:
        """Nom de 3 caractères minimum, sinon ValueError (ValidationError)."""
        event = Event(name=name)
        self.repo.add(event)
        self.event_dir(event.id).mkdir(parents=True, exist_ok=True)
        logger.info("Event created: %s (%s)", event.name, event.id)
        return event

    def switch_event(self, event_id: Optional[str]) -> Optional[Event]:
        """Active un évènement ; None revient au stock principal."""
        if event_id is None:
            self.settings.set_active_event(None)
            logger.info("Switched back to main inventory")
            return None
        event = self.get_event(event_id)
        if event is None:
            raise ValueError(f"event with id={event_id} not found")
        self.settings.set_active_event(event.id)
        logger.info("Switched to event %s", event.name)
        return event

    def active_event(self) -> Optional[Event]:
        event_id = self.settings.load().active_event_id
        if not event_id:
            return None
        event = self.get_event(event_id)
        if event is None:
            logger.warning("Active event %s no longer exists, using main inventory", event_id)
        return event

    def event_dir(self, event_id: str) -> Path:
        return self.base / "events" / event_id

    def workspace_dir(self) -> Path:
        """Dossier des données de l'évènement actif (ou data/)."""
        event = self.active_event()
        if event is None:
            return self.base
        path = self.event_dir(event.id)
        path.mkdir(parents=True, exist_ok=True)
        return path
