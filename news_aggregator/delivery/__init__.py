"""Operator notifications."""

from .email import AlertSender

__all__ = ["AlertSender"]
