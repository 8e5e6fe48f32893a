"""Service for notifying room participants about a draw."""

from __future__ import annotations

from typing import List

from core import get_logger
from database.models import Room
from services.email_templates import render_results_email, render_winner_email
from services.notifier import DeliveryResult, Notifier
from utils.performance import monitor

logger = get_logger(__name__)


class NotificationService:
    """Fans one draw result out to every room participant."""

    def __init__(self, notifier: Notifier):
        """Initialize notification service.

        Args:
            notifier: Transport selected at start-up
        """
        self.notifier = notifier

    @property
    def service(self) -> str:
        return self.notifier.service

    def notify_room_result(self, room: Room) -> List[DeliveryResult]:
        """Email the winner and the other participants of a completed room.

        Every address in the room gets exactly one message, duplicates
        included. Failures are logged per recipient and reported in the
        returned results; nothing is raised.

        Args:
            room: Room with its winner already committed

        Returns:
            One delivery result per recipient, in room order
        """
        if room.winner is None:
            raise ValueError(f"Room {room.id} has no winner to announce")

        winner_email = render_winner_email(room.name, len(room.emails))
        results_email = render_results_email(room.name, room.winner)

        results: List[DeliveryResult] = []
        for email in room.emails:
            rendered = winner_email if email == room.winner else results_email
            result = self.notifier.send(email, rendered.subject, rendered.html)
            monitor.record_notification(result.service, result.delivered)
            if result.delivered:
                logger.info(
                    "Notification sent to %s for room %s",
                    email, room.id,
                    extra={"room_id": room.id, "recipient": email},
                )
            else:
                logger.warning(
                    "Failed to notify %s for room %s: %s",
                    email, room.id, result.error,
                    extra={"room_id": room.id, "recipient": email},
                )
            results.append(result)

        delivered = sum(1 for result in results if result.delivered)
        logger.info("Emails processed for room %s: %d/%d", room.name, delivered, len(results))
        return results
