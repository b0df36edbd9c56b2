from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Protocol


@dataclass
class ReminderRequest:
    reservation_id: str
    business_name: str
    professional_name: str
    service_name: str
    client_name: str
    client_phone: Optional[str]
    date: date
    time: time


class ReminderScheduler(Protocol):
    name: str

    def schedule(self, request: ReminderRequest) -> None:
        ...
