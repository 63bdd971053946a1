"""Monitoring and user notice helpers."""

from .logger import configure_logging
from .notices import Notice, NoticeBoard, NoticeLevel

__all__ = ['Notice', 'NoticeBoard', 'NoticeLevel', 'configure_logging']
