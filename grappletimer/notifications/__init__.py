"""Notification package."""

from .scheduler import NotificationScheduler, ScheduledNotification, build_notifications

__all__ = ["NotificationScheduler", "ScheduledNotification", "build_notifications"]
