#!/usr/bin/env python3
"""Ponder - typing aliases and protocols of the transport layer."""

from __future__ import annotations

from typing import Protocol


class PublisherT(Protocol):
    """Anything that can publish a message to an MQTT broker."""

    async def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        """Publish a message, or raise PublishFailed."""
        ...
