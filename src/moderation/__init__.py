"""Moderation actions: hide/restore, pin/unpin and report-driven actions."""

from .service import ModerationService


__all__ = ["ModerationService"]
