"""Loki transport module."""

from .loki_sender import LokiSender, build_push_payload

__all__ = ["LokiSender", "build_push_payload"]
