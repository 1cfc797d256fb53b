"""
Live Eulerian Video Magnifier — Entry Point

Pipeline + Event Bus architecture:
    CaptureStage → [pyramid_queue] → MagnifyStage → [result_queue] → DisplayStage
                                         ↕ EventBus
                          TimingReporter ← FrameProcessed
                          FailureManager ← StageFailed

Usage:
    python main.py [key=value ...] <video file | camera index>
    python main.py levels=4 alpha=15 face.mp4 --display qt
"""
import sys
import signal
import argparse
from threading import Event
from typing import List, Optional

from utils.config import Config
from utils.constants import DISPLAY_BACKENDS, DEFAULT_QUEUE_SIZE, DEFAULT_POP_TIMEOUT
from utils.failures import FailureManager, MagnifierError
from utils.logger import Logger
from utils.settings import Settings, apply_cli_tokens

from core.bus import EventBus
from core.events import StageFailed, StageFinished
from core.magnifier import Magnifier
from core.pipeline_queue import PipelineQueue
from core.protocols import DisplaySink, FrameSource
from core.timing_reporter import TimingReporter


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Real-time Eulerian Video Magnification")
    parser.add_argument(
        'tokens',
        nargs='*',
        help='Settings as key=value (levels, alpha, lambda_c, cutoff_frequency_high, '
             'cutoff_frequency_low, chrom_attenuation, exaggeration_factor) '
             'followed by the video file or camera index'
    )
    parser.add_argument(
        '--config-dir',
        type=str,
        default=None,
        help='Directory of JSON config files (defaults to ./configs)'
    )
    parser.add_argument(
        '--display', '-d',
        choices=DISPLAY_BACKENDS,
        default=None,
        help='Display backend (overrides display.backend)'
    )
    parser.add_argument(
        '--synthetic',
        type=int,
        default=0,
        metavar='FRAMES',
        help='Use a generated oscillating test pattern of FRAMES frames instead of a video'
    )
    parser.add_argument(
        '--queue-size',
        type=int,
        default=None,
        help='Pipeline queue capacity, 0 for unbounded (overrides pipeline.queue_size)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Logging level (overrides logging.level)'
    )
    return parser.parse_args(argv)


class MagnifierNode:
    """
    Magnifier Orchestrator (Pipeline + Event Bus architecture).

    Wires together:
      - Pipeline stages (Capture → Magnify → Display) via PipelineQueues
      - Event bus subscribers (TimingReporter, FailureManager)
      - The display sink (OpenCV window, Qt window or headless)
    """

    def __init__(
        self,
        settings: Settings,
        config: Config,
        source: FrameSource,
        sink: DisplaySink,
    ):
        self.logger = Logger("MagnifierNode")
        self.settings = settings
        self.config = config
        self.source = source
        self.sink = sink

        # Shared shutdown signal
        self.stop_event = Event()

        # Central event bus (control plane)
        self.bus = EventBus()

        # ── Pipeline queues ──────────────────────────────────────────
        queue_size = config.get_int('pipeline.queue_size', DEFAULT_QUEUE_SIZE)
        policy = config.get('pipeline.backpressure', 'block')
        self.pyramid_queue = PipelineQueue(maxsize=queue_size, policy=policy, name="pyramids")
        self.result_queue = PipelineQueue(maxsize=queue_size, policy=policy, name="results")

        # ── Failure channel ──────────────────────────────────────────
        self.failures = FailureManager(self.stop_event)
        self.failures.add_shutdown_hook(self.pyramid_queue.abort)
        self.failures.add_shutdown_hook(self.result_queue.abort)
        self.bus.subscribe(StageFailed, self._on_stage_failed)
        self.finished = {}
        self.bus.subscribe(StageFinished, self._on_stage_finished)

        self.timing = TimingReporter(
            self.bus, report_every=config.get_int('logging.report_every', 30)
        )

        # ── Pipeline stages ──────────────────────────────────────────
        from core.stages import CaptureStage, MagnifyStage, DisplayStage
        pop_timeout = config.get_float('pipeline.pop_timeout', DEFAULT_POP_TIMEOUT)

        self.capture_stage = CaptureStage(
            source=self.source,
            out_queue=self.pyramid_queue,
            bus=self.bus,
            stop_event=self.stop_event,
            levels=settings.levels,
            fps=config.get_float('pipeline.capture_fps', 0.0),
        )
        self.magnify_stage = MagnifyStage(
            in_queue=self.pyramid_queue,
            out_queue=self.result_queue,
            bus=self.bus,
            stop_event=self.stop_event,
            magnifier=Magnifier(settings),
            pop_timeout=pop_timeout,
        )
        self.display_stage = DisplayStage(
            in_queue=self.result_queue,
            sink=self.sink,
            bus=self.bus,
            stop_event=self.stop_event,
            poll_interval_ms=config.get_int('display.poll_interval_ms', 30),
            pop_timeout=pop_timeout,
        )

    @property
    def stages(self):
        return [self.capture_stage, self.magnify_stage, self.display_stage]

    def _on_stage_failed(self, event: StageFailed) -> None:
        self.failures.record_failure(event.error, source=event.stage)

    def _on_stage_finished(self, event: StageFinished) -> None:
        self.finished[event.stage] = event.items

    def start(self) -> None:
        """Start the three pipeline threads."""
        self.logger.info("Starting pipeline stages...")
        for stage in self.stages:
            stage.start()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every stage thread to finish."""
        for stage in self.stages:
            stage.join(timeout)

    def run(self) -> None:
        """
        Run the pipeline to completion on the calling thread.

        Raises:
            The first stage failure, once every stage has unwound.
        """
        self.start()
        try:
            # Short joins keep the main thread responsive to signals
            while any(stage.is_alive() for stage in self.stages):
                self.join(timeout=0.2)
        finally:
            self.finish()
        self.failures.raise_if_failed()

    def stop(self) -> None:
        """Request a graceful shutdown; the source stops and queues drain."""
        if self.stop_event.is_set():
            return
        self.logger.info("Stopping magnifier...")
        self.stop_event.set()

    def finish(self) -> None:
        """Report statistics and release the bus once the stages are done."""
        if self.pyramid_queue.dropped or self.result_queue.dropped:
            self.logger.warning(
                f"Dropped {self.pyramid_queue.dropped} pyramid(s) and "
                f"{self.result_queue.dropped} result(s) under backpressure"
            )
        if self.finished:
            counts = ", ".join(f"{stage}={items}" for stage, items in self.finished.items())
            self.logger.info(f"Items handled: {counts}")
        self.timing.report()
        self.timing.close()
        self.bus.clear()
        self.logger.info("Magnifier stopped")


def build_source(settings: Settings, synthetic_frames: int = 0) -> FrameSource:
    """Pick the frame source for this run."""
    if synthetic_frames > 0:
        from Handlers.Synthetic_Source_Handler import SyntheticSourceHandler
        return SyntheticSourceHandler(width=320, height=240, frames=synthetic_frames,
                                      amplitude=2.0, period=8.0, patch=48)
    from Handlers.Video_Input_Handler import VideoInputHandler
    return VideoInputHandler(settings.source)


def build_sink(backend: str) -> DisplaySink:
    """Create the display sink for the chosen backend."""
    if backend == "qt":
        from Handlers.Frame_Viewer_Handler import QueueDisplaySink
        return QueueDisplaySink()
    if backend == "opencv":
        from Handlers.Display_Handler import OpenCVDisplaySink
        return OpenCVDisplaySink()
    from Handlers.Display_Handler import NullDisplaySink
    return NullDisplaySink()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    # ── 1. Foundation ────────────────────────────────────────────────
    overrides = {}
    if args.log_level:
        overrides['logging'] = {'level': args.log_level}
    if args.queue_size is not None:
        overrides['pipeline'] = {'queue_size': args.queue_size}
    config = Config(args.config_dir, overrides=overrides)
    log_settings = dict(config.get('logging', {}))
    log_settings['file'] = config.get_bool('logging.file', True)
    Logger.setup(log_settings)
    logger = Logger("main")

    settings = apply_cli_tokens(Settings.from_config(config), args.tokens)
    logger.info("Settings:\n" + settings.describe())

    backend = args.display or config.get('display.backend', 'opencv')
    source = build_source(settings, args.synthetic)
    sink = build_sink(backend)
    node = MagnifierNode(settings, config, source, sink)

    # ── 2. OS Signals ────────────────────────────────────────────────
    def handler(sig, frame):
        logger.info("Shutdown signal received")
        node.stop()
    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)

    try:
        if backend == "qt":
            run_with_viewer(node, sink, config)
        else:
            node.run()
    except MagnifierError as e:
        log = logger.critical if e.critical else logger.error
        log(f"Pipeline failed: {e.message}")
        return 1
    return 0


def run_with_viewer(node: MagnifierNode, sink, config: Config) -> None:
    """Run the pipeline threads while the Qt event loop owns the main thread."""
    from PyQt6.QtWidgets import QApplication
    from Handlers.Frame_Viewer_Handler import FrameViewerHandler

    app = QApplication.instance() or QApplication(sys.argv)
    viewer = FrameViewerHandler(
        sink, poll_interval_ms=config.get_int('display.poll_interval_ms', 30)
    )
    viewer.show()

    node.start()
    try:
        app.exec()
    finally:
        # Window closed early or stream finished — unwind the pipeline
        node.stop()
        node.join()
        node.finish()
    node.failures.raise_if_failed()


if __name__ == "__main__":
    sys.exit(main())
