from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class StoreError(AppError):
    """The persistent store could not complete a read or write."""


class DecodeError(AppError):
    """An inbound frame is not a JSON object with a string ``type``."""


class ValidationError(DecodeError):
    """A known event is missing a required field or has the wrong shape."""


class DeliveryError(AppError):
    """A payload could not be handed to one connection."""
