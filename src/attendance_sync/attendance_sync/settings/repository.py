from __future__ import annotations

from typing import Optional, Protocol

from .model import GracePolicy


class HrSettingsRepository(Protocol):
    def get_grace_policy(self) -> Optional[GracePolicy]:
        """Policy from the first HR settings row, or None if the table is empty."""

        raise NotImplementedError

    def create_default(self) -> None:
        raise NotImplementedError
