"""Contracts for collaborators the orchestrator consumes but does not implement."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, Sequence

logger = logging.getLogger(__name__)


class NotificationTransport(Protocol):
    """Delivers alerts (chat, e-mail, webhook...). Fire-and-forget."""

    async def send(self, alert: dict[str, Any]) -> None:
        ...


class TrendPredictor(Protocol):
    """Predicts quality trends from a historical score series.

    Must return a mapping with ``trend``, ``projected_score``,
    ``risk_factors``, ``recommendations`` and ``confidence``.
    """

    async def predict_trends(self, history: Sequence[dict[str, Any]]) -> dict[str, Any]:
        ...


class LoggingNotifier:
    """Default transport: writes alerts to the log and keeps them for inspection."""

    def __init__(self, *, level: int = logging.WARNING) -> None:
        self._level = level
        self.sent: list[dict[str, Any]] = []

    async def send(self, alert: dict[str, Any]) -> None:
        self.sent.append(alert)
        logger.log(self._level, "Quality alert: %s", json.dumps(alert, default=str))


__all__ = ["LoggingNotifier", "NotificationTransport", "TrendPredictor"]
