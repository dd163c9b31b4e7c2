"""Register storage for killed text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

KILL_RING_SIZE = 9


@dataclass(slots=True)
class RegisterValue:
    text: str
    type: str = "character"  # character or line


class RegisterBank:
    """Tracks the unnamed register, named registers, and a numbered kill ring.

    Every kill lands in ``"`` and is pushed onto ``"1"``; older kills shift
    down to ``"9"`` and then fall off.
    """

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {}
        self._registers['"'] = RegisterValue(text="")

    def get(self, name: str) -> RegisterValue:
        return self._registers.get(name, RegisterValue(text=""))

    def set(self, name: str, value: RegisterValue) -> None:
        self._registers[name] = value
        if name != '"':
            self._registers['"'] = value

    def kill(self, text: str, *, register_type: str = "character") -> RegisterValue:
        value = RegisterValue(text=text, type=register_type)
        for slot in range(KILL_RING_SIZE, 1, -1):
            previous = self._registers.get(str(slot - 1))
            if previous is not None:
                self._registers[str(slot)] = previous
        self.set("1", value)
        return value

    def kill_ring(self) -> List[str]:
        ring = []
        for slot in range(1, KILL_RING_SIZE + 1):
            value = self._registers.get(str(slot))
            if value is None:
                break
            ring.append(value.text)
        return ring
