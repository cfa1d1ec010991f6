"""Notification and channel adapters."""

from taskline.adapters.notify.log_adapters import LogChannel, LogChannelResolver, LogNotifier

__all__ = ["LogChannel", "LogChannelResolver", "LogNotifier"]
