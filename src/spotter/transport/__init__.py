"""Outbound message delivery."""

from spotter.transport.sinks import BufferedTransport, OutboundMessage, Transport

__all__ = ["Transport", "BufferedTransport", "OutboundMessage"]
