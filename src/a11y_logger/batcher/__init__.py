"""Log buffering module for batched transmission."""

from .log_buffer import FlushCallback, LogBuffer, TimerFactory

__all__ = ["LogBuffer", "FlushCallback", "TimerFactory"]
