import copy
from typing import Any, Iterable, List, Optional

from ....application.ports.records_repo import ClinicRecords, RecordStore


class InMemoryRecordStore(RecordStore):
    def __init__(self, records: Optional[Iterable[Any]] = None) -> None:
        self._records: List[Any] = copy.deepcopy(list(records or []))

    def load_all(self) -> List[Any]:
        # Callers mutate what they load, so hand out copies
        return copy.deepcopy(self._records)

    def save_all(self, records: List[Any]) -> None:
        self._records = copy.deepcopy(list(records))


def memory_clinic_records(patients=None, doctors=None, appointments=None) -> ClinicRecords:
    return ClinicRecords(
        patients=InMemoryRecordStore(patients),
        doctors=InMemoryRecordStore(doctors),
        appointments=InMemoryRecordStore(appointments),
    )
