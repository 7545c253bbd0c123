"""Delivery of redirect proposals to the site API."""

from redirectfinder.delivery.sender import ResultsSender

__all__ = ["ResultsSender"]
