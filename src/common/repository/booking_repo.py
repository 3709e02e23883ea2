import copy
import logging
import threading
from dataclasses import fields, replace
from typing import Any, Dict, Iterable, List, Optional

from common.models.bookings import Booking
from common.utils.custom_exceptions import DuplicateKey, NotFoundException


logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"booking_id", "access_token", "booking_date"}
_BOOKING_FIELDS = {f.name for f in fields(Booking)}


class BookingRepository:
    def __init__(self, bookings: Optional[Iterable[Booking]] = None):
        self._bookings: Dict[str, Booking] = {}
        self._ids_by_token: Dict[str, str] = {}
        self._booking_locks: Dict[str, threading.RLock] = {}
        self._lock = threading.RLock()
        self._last_id = 0

        for booking in bookings or []:
            self.insert(booking)

    def lock(self, booking_id: str) -> threading.RLock:
        with self._lock:
            booking_lock = self._booking_locks.get(booking_id)
            if booking_lock is None:
                booking_lock = threading.RLock()
                self._booking_locks[booking_id] = booking_lock
            return booking_lock

    def next_id(self) -> str:
        with self._lock:
            self._last_id += 1
            while str(self._last_id) in self._bookings:
                self._last_id += 1
            return str(self._last_id)

    def token_exists(self, token: str) -> bool:
        with self._lock:
            return token in self._ids_by_token

    def insert(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.booking_id in self._bookings:
                logger.error(f"Duplicate booking id {booking.booking_id}")
                raise DuplicateKey(f"booking id '{booking.booking_id}' already exists")
            if booking.access_token in self._ids_by_token:
                logger.error(f"Duplicate access token for booking {booking.booking_id}")
                raise DuplicateKey("access token already exists")

            self._bookings[booking.booking_id] = copy.deepcopy(booking)
            self._ids_by_token[booking.access_token] = booking.booking_id
            if booking.booking_id.isdigit():
                self._last_id = max(self._last_id, int(booking.booking_id))
            return copy.deepcopy(booking)

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return copy.deepcopy(booking) if booking else None

    def find_by_token(self, token: str) -> Optional[Booking]:
        with self._lock:
            booking_id = self._ids_by_token.get(token)
            if booking_id is None:
                return None
            return copy.deepcopy(self._bookings[booking_id])

    def list_all(self) -> List[Booking]:
        with self._lock:
            return [copy.deepcopy(b) for b in self._bookings.values()]

    def update(self, booking_id: str, patch: Dict[str, Any]) -> Booking:
        """Merge the non-None values of ``patch`` into a stored booking.

        ``contact_info`` may be a partial mapping and is merged field by field.
        """
        unknown = set(patch) - _BOOKING_FIELDS
        if unknown:
            raise ValueError(f"unknown booking fields: {sorted(unknown)}")
        frozen = _IMMUTABLE_FIELDS & {k for k, v in patch.items() if v is not None}
        if frozen:
            raise ValueError(f"immutable booking fields: {sorted(frozen)}")

        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                raise NotFoundException("booking", booking_id)

            changes = {}
            for key, value in patch.items():
                if value is None:
                    continue
                if key == "contact_info" and isinstance(value, dict):
                    contact_changes = {k: v for k, v in value.items() if v is not None}
                    value = replace(current.contact_info, **contact_changes)
                changes[key] = copy.deepcopy(value)

            updated = replace(current, **changes)
            self._bookings[booking_id] = updated
            return copy.deepcopy(updated)

    def save(self, booking: Booking) -> Booking:
        with self._lock:
            current = self._bookings.get(booking.booking_id)
            if current is None:
                raise NotFoundException("booking", booking.booking_id)
            if current.access_token != booking.access_token:
                raise ValueError("access token is immutable")

            self._bookings[booking.booking_id] = copy.deepcopy(booking)
            return copy.deepcopy(booking)

    def remove(self, booking_id: str) -> None:
        with self._lock:
            booking = self._bookings.pop(booking_id, None)
            if booking is None:
                raise NotFoundException("booking", booking_id)
            self._ids_by_token.pop(booking.access_token, None)
            self._booking_locks.pop(booking_id, None)
