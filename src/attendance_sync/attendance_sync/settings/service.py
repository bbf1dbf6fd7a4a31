from __future__ import annotations

import logging

from .model import GracePolicy
from .repository import HrSettingsRepository

logger = logging.getLogger(__name__)


class GracePolicyService:
    def __init__(self, settings: HrSettingsRepository):
        self._settings = settings

    def current(self) -> GracePolicy:
        """Load the grace policy, inserting a default settings row if none exists."""
        policy = self._settings.get_grace_policy()
        if policy is not None:
            return policy

        logger.warning("No HR settings found, creating default settings")
        self._settings.create_default()
        return GracePolicy.defaults()
