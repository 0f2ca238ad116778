"""Sequential, prefixed record ids for patients, doctors and appointments."""
import threading
from typing import Dict, Iterable


PATIENT_PREFIX = "P"
DOCTOR_PREFIX = "D"
APPOINTMENT_PREFIX = "C"


class IdentityAllocator:
    """Hands out ids like "P001", "D002", "C013".

    The next number is one past the highest suffix among the current records,
    and never below anything this allocator has already issued, so an id
    freed by a deletion is not reused while the process runs.
    """

    def __init__(self, width: int = 3) -> None:
        self.width = width
        self._issued: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next_id(self, prefix: str, records: Iterable) -> str:
        highest = 0
        for record in records:
            record_id = getattr(record, "id", None) or ""
            suffix = record_id[len(prefix):]
            if record_id.startswith(prefix) and suffix.isdigit():
                highest = max(highest, int(suffix))
        with self._lock:
            number = max(highest, self._issued.get(prefix, 0)) + 1
            self._issued[prefix] = number
        return f"{prefix}{number:0{self.width}d}"

    def retire(self, prefix: str, record_id: str) -> None:
        """Remember a deleted id so its number is never handed out again."""
        suffix = record_id[len(prefix):]
        if not record_id.startswith(prefix) or not suffix.isdigit():
            return
        with self._lock:
            self._issued[prefix] = max(self._issued.get(prefix, 0), int(suffix))


default_allocator = IdentityAllocator()
