import json
import signal

import cv2
import numpy as np
import pytest

from Handlers.Video_Input_Handler import VideoInputHandler
from main import build_sink, main, parse_args


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Config directory that keeps logs off disk; OS signal handlers left alone."""
    directory = tmp_path / "configs"
    directory.mkdir()
    (directory / "logging.json").write_text(json.dumps({"logging": {"file": False}}))
    monkeypatch.setattr(signal, "signal", lambda *args: None)
    monkeypatch.delenv("EVM_SOURCE", raising=False)
    monkeypatch.delenv("EVM_LOG_LEVEL", raising=False)
    return str(directory)


@pytest.fixture
def clip(tmp_path):
    """Five 64x48 frames written with cv2.VideoWriter."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("MJPG writer unavailable in this OpenCV build")
    for i in range(5):
        frame = np.full((48, 64, 3), (90, 120, 150), dtype=np.uint8)
        frame[20:28, 28:36] += i
        writer.write(frame)
    writer.release()
    return path


def test_parse_args_keeps_setting_tokens_in_order():
    args = parse_args(["levels=4", "alpha=15", "face.mp4", "--display", "none", "--queue-size", "0"])

    assert args.tokens == ["levels=4", "alpha=15", "face.mp4"]
    assert args.display == "none"
    assert args.queue_size == 0


def test_build_sink_headless():
    sink = build_sink("none")
    assert sink.shown == {}


def test_exhausted_stream_exits_zero(config_dir):
    assert main(["levels=3", "--synthetic", "6", "--display", "none", "--config-dir", config_dir]) == 0


def test_missing_video_file_exits_one(config_dir, tmp_path):
    missing = str(tmp_path / "does_not_exist.avi")
    assert main([missing, "--display", "none", "--config-dir", config_dir]) == 1


def test_video_file_plays_through_pipeline(config_dir, clip):
    assert main(["levels=3", str(clip), "--display", "none", "--config-dir", config_dir]) == 0


def test_video_input_handler_reads_clip(clip):
    source = VideoInputHandler(str(clip))
    assert source.start()
    assert source.frame_size == (64, 48)

    frames = []
    while True:
        frame = source.read_frame()
        if frame is None:
            break
        frames.append(frame)
    source.stop()

    assert len(frames) == 5
    assert all(f.shape == (48, 64, 3) and f.dtype == np.uint8 for f in frames)
    assert source.read_frame() is None


def test_video_input_handler_rejects_missing_file(tmp_path):
    source = VideoInputHandler(str(tmp_path / "nope.avi"))

    assert not source.start()
    assert source.read_frame() is None


def test_numeric_identifier_is_a_camera_index():
    assert VideoInputHandler("0").target == 0
    assert VideoInputHandler("clip.mp4").target == "clip.mp4"
