# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ListFocus(Enum):
    KNOWN = 'known'
    NEW = 'new'

    def __repr__(self) -> str:
        return self.value


@dataclass
class SelectionState:
    index: Optional[int] = None
    key: Optional[str] = None

    @staticmethod
    def first_of(keys: list[str]) -> 'SelectionState':
        if keys:
            return SelectionState(0, keys[0])
        return SelectionState()

    def select(self, index: Optional[int], key: Optional[str] = None) -> None:
        self.index = index
        self.key = key

    def next_index(self, total_rows: int) -> Optional[int]:
        if total_rows <= 0:
            return None
        if self.index is None:
            return 0
        return min(self.index + 1, total_rows - 1)

    def previous_index(self, total_rows: int) -> Optional[int]:
        if total_rows <= 0:
            return None
        if self.index is None:
            return 0
        return max(min(self.index, total_rows) - 1, 0)


class KnownRowKind(Enum):
    ETHERNET = 'ethernet'
    NETWORK = 'network'
    UNAVAILABLE = 'unavailable'

    def __repr__(self) -> str:
        return self.value


@dataclass(frozen=True)
class KnownSelection:
    kind: KnownRowKind
    index: int = 0
