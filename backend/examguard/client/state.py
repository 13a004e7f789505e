from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Literal

from pydantic import BaseModel, Field


class Decision(BaseModel):
    violations: int = Field(..., ge=0)
    action: Literal["ok", "warn", "end"]
    message: str = ""


@dataclass
class DebugEntry:
    time: str
    event: str
    description: str


@dataclass
class EscalationState:
    """The tab's cached view of the escalation.

    Owned by the reporter, shared by reference with enforcement and read by
    the detector. ``terminated`` only ever goes from False to True.
    """
    violation_count: int = 0
    warning_shown: bool = False
    debug_log_size: int = 500
    _terminated: bool = field(default=False, repr=False)
    debug_log: Deque[DebugEntry] = field(default=None, repr=False)

    def __post_init__(self):
        if self.debug_log is None:
            self.debug_log = deque(maxlen=self.debug_log_size)

    @property
    def terminated(self) -> bool:
        return self._terminated

    def mark_terminated(self) -> bool:
        """Returns True only for the call that flipped the flag"""
        if self._terminated:
            return False
        self._terminated = True
        return True

    def log(self, event: str, description: str) -> DebugEntry:
        entry = DebugEntry(
            time=datetime.now(timezone.utc).isoformat(),
            event=event,
            description=description
        )
        self.debug_log.append(entry)
        return entry

    def entries(self) -> List[DebugEntry]:
        return list(self.debug_log)
