#!/usr/bin/env python3
"""
Event operations against the events sheet
"""

import time
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from tiketnow.models import Event
from tiketnow.services.cache import TimedCache
from tiketnow.services.script_client import ScriptWriteClient, format_amount
from tiketnow.services.sheet_source import SheetSource, SheetLoadError
from tiketnow.utils.row_mapper import map_event_rows

logger = logging.getLogger(__name__)

EVENTS_KEY = 'events'


class EventService(ABC):
    """Read and write access to events"""

    @abstractmethod
    def get_all_events(self) -> List[Event]:
        ...

    @abstractmethod
    def create_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def update_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def delete_event(self, event_id: str) -> None:
        ...


def event_to_fields(event: Event) -> Dict[str, str]:
    """Form fields expected by the script endpoint for create/update"""
    return {
        'id': event.id,
        'name': event.name,
        'date': event.date,
        'hour': event.hour,
        'description': event.description,
        'location': event.location,
        'image': event.image,
        'ticketPrice': format_amount(event.ticket_price),
        'vipPrice': format_amount(event.vip_price),
        'capacity': str(event.capacity),
        'createdBy': event.created_by,
        'status': event.status.value,
    }


class GoogleSheetsEventService(EventService):
    """Events stored in the events sheet, cached for a short window"""

    def __init__(self, source: SheetSource, writer: ScriptWriteClient,
                 sheet_name: str = 'Hoja 2', cache: Optional[TimedCache] = None,
                 load_attempts: int = 3, retry_delay: float = 2.0,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.time,
                 use_header: bool = False):
        self.source = source
        self.writer = writer
        self.sheet_name = sheet_name
        self.cache = cache or TimedCache()
        self.load_attempts = max(1, load_attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._clock = clock
        self.use_header = use_header
        self._initial_load_done = False
        # True while reads are answered from an expired copy after a failed load
        self.serving_stale = False

    def get_all_events(self) -> List[Event]:
        """All events, newest first. Falls back to the last good load on failure."""
        cached = self.cache.get(EVENTS_KEY)
        if cached is not None:
            logger.info("Using cached events")
            self.serving_stale = False
            return list(cached)

        sequence = self.cache.begin()
        try:
            rows = self.source.fetch_rows(self.sheet_name)
        except SheetLoadError as e:
            stale = self.cache.get_stale(EVENTS_KEY)
            if stale is not None:
                logger.warning(f"Event load failed, serving cached events: {e}")
                self.serving_stale = True
                return list(stale)
            raise

        events = map_event_rows(rows, use_header=self.use_header)
        self.cache.put(EVENTS_KEY, events, sequence)
        self.serving_stale = False
        logger.info(f"{len(events)} events loaded")
        return list(events)

    def load_initial_events(self) -> List[Event]:
        """
        First load of the process, retried a bounded number of times with a
        fixed delay. Later loads go through get_all_events without retry.
        """
        last_error = None
        for attempt in range(1, self.load_attempts + 1):
            try:
                events = self.get_all_events()
                self._initial_load_done = True
                return events
            except SheetLoadError as e:
                last_error = e
                logger.warning(f"Initial event load attempt {attempt}/{self.load_attempts} failed: {e}")
                if attempt < self.load_attempts:
                    self._sleep(self.retry_delay)
        raise last_error

    def get_events(self) -> List[Event]:
        """Initial load with retry the first time, plain load afterwards"""
        if not self._initial_load_done:
            return self.load_initial_events()
        return self.get_all_events()

    def get_event(self, event_id: str) -> Optional[Event]:
        return next((e for e in self.get_events() if e.id == event_id), None)

    def get_public_events(self) -> List[Event]:
        """Storefront listing: active events only"""
        return [e for e in self.get_events() if e.is_active]

    def create_event(self, event: Event) -> Event:
        """Assign id and creation time, send the write, patch cached events"""
        now_ms = int(self._clock() * 1000)
        event.id = event.id or str(now_ms)
        event.created_at = event.created_at or datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).isoformat()

        self.writer.post('create', event_to_fields(event))
        self.cache.update(EVENTS_KEY, lambda events: [event] + list(events))
        logger.info(f"Created event: {event.name} ({event.id})")
        return event

    def update_event(self, event: Event) -> Event:
        self.writer.post('update', event_to_fields(event))
        self.cache.update(EVENTS_KEY, lambda events: [event if e.id == event.id else e for e in events])
        logger.info(f"Updated event: {event.name} ({event.id})")
        return event

    def delete_event(self, event_id: str) -> None:
        self.writer.post('delete', {'id': event_id})
        self.cache.update(EVENTS_KEY, lambda events: [e for e in events if e.id != event_id])
        logger.info(f"Deleted event: {event_id}")

    def refresh(self):
        """Drop the freshness window so the next read goes to the sheet"""
        self.cache.invalidate(EVENTS_KEY)
