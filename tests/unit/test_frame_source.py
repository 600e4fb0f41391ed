"""
프레임 소스 단위 테스트

검증 조건:
- BGR → I420 PlanarFrame 분할 (크기, stride, 회색 중립 크로마)
- 홀수 크기 / 채널 수 오류
- SyntheticFrameSource 프레임 크기 및 움직임
- VideoFileFrameSource 파일 없음 오류, 끝 도달 시 None, 반복 재생
"""

from __future__ import annotations

import cv2
import numpy as np
import pytest

from src.capture import FrameSourceError, PlanarFrame
from src.capture.frame_source import (
    SyntheticFrameSource,
    VideoFileFrameSource,
    create_frame_source,
    planar_frame_from_bgr,
)
from src.config.schema import AppConfig
from src.convert import unpack_rgb, yuv_to_argb_scaled


@pytest.fixture
def small_config():
    return AppConfig(capture={"width": 64, "height": 32})


def _write_video(path, frame_count: int = 3, width: int = 64, height: int = 48) -> None:
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (width, height))
    if not writer.isOpened():
        pytest.skip("MJPG VideoWriter 사용 불가")
    for i in range(frame_count):
        writer.write(np.full((height, width, 3), 40 * (i + 1), dtype=np.uint8))
    writer.release()


class TestPlanarFrameFromBgr:
    def test_plane_layout(self):
        frame = planar_frame_from_bgr(np.zeros((6, 8, 3), dtype=np.uint8), timestamp_ns=7)
        assert (frame.width, frame.height) == (8, 6)
        assert frame.y.row_stride == 8
        assert frame.u.row_stride == frame.v.row_stride == 4
        assert frame.u.pixel_stride == 1
        assert frame.y.data.size == 48
        assert frame.u.data.size == frame.v.data.size == 12
        assert frame.timestamp_ns == 7

    def test_gray_has_neutral_chroma(self):
        frame = planar_frame_from_bgr(np.full((4, 4, 3), 128, dtype=np.uint8))
        assert np.all(np.abs(frame.u.data.astype(int) - 128) <= 1)
        assert np.all(np.abs(frame.v.data.astype(int) - 128) <= 1)
        assert np.unique(frame.y.data).size == 1

    def test_converts_back_to_gray(self):
        frame = planar_frame_from_bgr(np.full((4, 4, 3), 128, dtype=np.uint8))
        r, g, b = unpack_rgb(yuv_to_argb_scaled(frame, scale_factor=1).pixels)
        assert np.all(np.abs(r - g) <= 2)
        assert np.all(np.abs(g - b) <= 2)

    def test_odd_size_rejected(self):
        with pytest.raises(FrameSourceError):
            planar_frame_from_bgr(np.zeros((5, 8, 3), dtype=np.uint8))

    def test_grayscale_image_rejected(self):
        with pytest.raises(FrameSourceError):
            planar_frame_from_bgr(np.zeros((4, 4), dtype=np.uint8))


class TestSyntheticFrameSource:
    def test_frame_size(self, small_config):
        source = SyntheticFrameSource(small_config)
        frame = source.read()
        assert isinstance(frame, PlanarFrame)
        assert (frame.width, frame.height) == (64, 32)
        assert frame.timestamp_ns > 0
        source.close()

    def test_pattern_moves(self, small_config):
        source = SyntheticFrameSource(small_config)
        first = source.read().y.data.copy()
        second = source.read().y.data.copy()
        assert not np.array_equal(first, second)


class TestVideoFileFrameSource:
    def test_missing_file(self, tmp_path):
        config = AppConfig(system={"mode": "file"}, capture={"video_path": str(tmp_path / "none.avi")})
        with pytest.raises(FrameSourceError):
            VideoFileFrameSource(config)

    def test_reads_until_end(self, tmp_path):
        path = tmp_path / "clip.avi"
        _write_video(path, frame_count=3)
        source = VideoFileFrameSource(AppConfig(capture={"video_path": str(path)}))
        frames = [source.read() for _ in range(3)]
        assert all(f is not None for f in frames)
        assert (frames[0].width, frames[0].height) == (64, 48)
        assert source.read() is None
        source.close()

    def test_loop_restarts(self, tmp_path):
        path = tmp_path / "loop.avi"
        _write_video(path, frame_count=2)
        source = VideoFileFrameSource(AppConfig(capture={"video_path": str(path), "loop": True}))
        frames = [source.read() for _ in range(5)]
        assert all(f is not None for f in frames)
        source.close()


class TestCreateFrameSource:
    def test_synthetic_default(self, small_config):
        assert isinstance(create_frame_source(small_config), SyntheticFrameSource)

    def test_file_mode(self, tmp_path):
        path = tmp_path / "clip.avi"
        _write_video(path, frame_count=1)
        config = AppConfig(system={"mode": "file"}, capture={"video_path": str(path)})
        source = create_frame_source(config)
        assert isinstance(source, VideoFileFrameSource)
        source.close()
