"""
Pipeline stages for the live magnifier.

The video pipeline is modeled as three long-lived threads connected by
pipeline queues:

    CaptureStage → [pyramid_queue] → MagnifyStage → [result_queue] → DisplayStage

End of input propagates as signal_done() from queue to queue. A failure in
any stage is published on the event bus, which aborts both queues so the
other stages unwind instead of waiting forever.
"""
from .base import PipelineStage
from .capture import CaptureStage
from .magnify import MagnifyStage
from .display import DisplayStage

__all__ = ["PipelineStage", "CaptureStage", "MagnifyStage", "DisplayStage"]
