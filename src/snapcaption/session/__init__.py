"""
Session Module
==============

Orchestration of one capture-and-caption session.

Components:
    - SessionState: Flags, current-frame slot and log
    - SingleSlotDispatcher: Capacity-1 background runner
    - CaptionSession: Boundary driven by the presentation layer
"""

from snapcaption.session.state import CaptionLog, SessionState
from snapcaption.session.dispatcher import SingleSlotDispatcher
from snapcaption.session.exports import save_capture, save_caption_log
from snapcaption.session.controller import CaptionSession


__all__ = [
    "CaptionLog",
    "CaptionSession",
    "SessionState",
    "SingleSlotDispatcher",
    "save_capture",
    "save_caption_log",
]
