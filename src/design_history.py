"""
Bounded undo history of design configs.

Configs are immutable, so the history stores them directly. Committing after
an undo discards the undone entries.
"""
from typing import List, Optional

from design_config import DesignConfig

DEFAULT_MAX_ENTRIES = 20


class DesignHistory:
    """Linear undo stack holding at most max_entries configs."""

    def __init__(self, initial: Optional[DesignConfig] = None,
                 max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: List[DesignConfig] = [initial if initial is not None else DesignConfig()]
        self._cursor = 0

    @property
    def current(self) -> DesignConfig:
        return self._entries[self._cursor]

    def __len__(self) -> int:
        return self._cursor + 1

    def can_undo(self) -> bool:
        return self._cursor > 0

    def commit(self, config: DesignConfig) -> DesignConfig:
        """Make config current. Identical consecutive commits are ignored."""
        if config == self.current:
            return config
        del self._entries[self._cursor + 1:]
        self._entries.append(config)
        if len(self._entries) > self.max_entries:
            del self._entries[:len(self._entries) - self.max_entries]
        self._cursor = len(self._entries) - 1
        return config

    def undo(self) -> DesignConfig:
        """Step back one entry; stays put at the oldest entry."""
        if self._cursor > 0:
            self._cursor -= 1
        return self.current
