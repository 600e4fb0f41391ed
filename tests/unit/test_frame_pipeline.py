"""
FramePipeline 단위 테스트

검증 조건:
- 3단계 처리 결과 크기/필터 적용 확인
- 단계별 시간 기록 및 MetricsStore 스냅샷 발행
- 처리 중 프레임 드롭 (drop_count 증가)
- 단계 예외 전파 후에도 다음 프레임 처리 가능
- 필터/모드 순환, 설정 핫스왑, 메트릭 초기화
"""

from __future__ import annotations

import time

import numpy as np
import pytest

from src.capture import Plane, PlanarFrame
from src.config.schema import AppConfig
from src.convert import unpack_rgb
from src.filters import FilterType
from src.filters.backend import ExecutionMode
from src.metrics.metrics_store import MetricsStore
from src.metrics.performance_tracker import PerformanceTracker
from src.pipeline import FramePipeline


# =========================================================================
# 픽스처 / 헬퍼
# =========================================================================

def _gradient_frame(width: int = 16, height: int = 8) -> PlanarFrame:
    luma = (np.arange(width * height) % 256).astype(np.uint8)
    chroma_size = (width // 2) * (height // 2)
    return PlanarFrame(
        y=Plane(luma, row_stride=width),
        u=Plane(np.full(chroma_size, 100, dtype=np.uint8), row_stride=width // 2),
        v=Plane(np.full(chroma_size, 160, dtype=np.uint8), row_stride=width // 2),
        width=width,
        height=height,
    )


class _FakeClock:
    def __init__(self, times_ms):
        self._times = iter(times_ms)

    def __call__(self) -> int:
        return int(next(self._times) * 1_000_000)


class _FailingCompositor:
    """compose()에서 예외를 던지는 컴포지터 대역입니다."""

    def __init__(self):
        self.fail = True

    def compose(self, frame):
        if self.fail:
            raise RuntimeError("compose 실패")
        return np.zeros((frame.height, frame.width, 3), dtype=np.uint8)

    def update_config(self, config):
        pass


@pytest.fixture
def config():
    return AppConfig(pipeline={"scale_factor": 2, "filter": "NONE", "execution_mode": "BASELINE"})


@pytest.fixture
def store():
    return MetricsStore()


@pytest.fixture
def pipeline(config, store):
    return FramePipeline(config, metrics_store=store)


# =========================================================================
# 프레임 처리
# =========================================================================

class TestProcess:
    def test_output_dimensions(self, pipeline):
        result = pipeline.process(_gradient_frame(16, 8))
        assert result is not None
        assert (result.frame.width, result.frame.height) == (8, 4)
        assert result.image.shape == (4, 8, 3)

    def test_sample_recorded(self, pipeline):
        result = pipeline.process(_gradient_frame())
        sample = result.sample
        assert sample.process_ms == pytest.approx(
            sample.yuv_ms + sample.filter_ms + sample.display_ms
        )
        assert sample.end_to_end_ms >= sample.process_ms - 1e-6
        assert pipeline.tracker.frame_count == 1

    def test_end_to_end_from_capture_time(self, pipeline):
        capture_ns = time.perf_counter_ns() - 50_000_000
        result = pipeline.process(_gradient_frame(), capture_ns=capture_ns)
        assert result.sample.end_to_end_ms >= 50.0

    def test_filter_applied(self, pipeline):
        pipeline.set_filter(FilterType.GRAYSCALE)
        result = pipeline.process(_gradient_frame())
        r, g, b = unpack_rgb(result.frame.pixels)
        assert np.array_equal(r, g) and np.array_equal(g, b)

    def test_snapshot_published(self, pipeline, store):
        pipeline.process(_gradient_frame(16, 8))
        metrics = store.get_frame_metrics()
        assert metrics.frame_width == 8
        assert metrics.frame_height == 4
        assert metrics.frame_count == 1
        assert metrics.filter_type is FilterType.NONE

    def test_frame_dropped_while_in_flight(self, pipeline):
        pipeline._in_flight.acquire()
        try:
            assert pipeline.process(_gradient_frame()) is None
        finally:
            pipeline._in_flight.release()
        assert pipeline.drop_count == 1
        assert pipeline.tracker.frame_count == 0
        assert pipeline.process(_gradient_frame()) is not None

    def test_stage_error_propagates_and_releases_guard(self, config):
        compositor = _FailingCompositor()
        pipeline = FramePipeline(config, compositor=compositor)
        with pytest.raises(RuntimeError):
            pipeline.process(_gradient_frame())
        assert pipeline.tracker.frame_count == 0

        compositor.fail = False
        assert pipeline.process(_gradient_frame()) is not None
        assert pipeline.drop_count == 0

    def test_throughput(self, store):
        config = AppConfig(pipeline={"scale_factor": 1})
        tracker = PerformanceTracker(window_size=5, clock=_FakeClock([0, 100]))
        pipeline = FramePipeline(config, tracker=tracker, metrics_store=store)
        pipeline.process(_gradient_frame(64, 32))
        pipeline.process(_gradient_frame(64, 32))
        metrics = pipeline.snapshot()
        assert metrics.fps == pytest.approx(10.0)
        assert metrics.throughput_mb_s == pytest.approx(64 * 32 * 4 * 10 / (1024 * 1024))


# =========================================================================
# 제어
# =========================================================================

class TestControls:
    def test_cycle_filter(self, pipeline):
        assert pipeline.cycle_filter() is FilterType.GRAYSCALE
        assert pipeline.cycle_filter() is FilterType.SOBEL_EDGE

    def test_cycle_mode_wraps(self, pipeline):
        modes = [pipeline.cycle_mode() for _ in range(4)]
        assert modes[-1] is ExecutionMode.BASELINE

    def test_control_change_published(self, pipeline, store):
        pipeline.set_mode(ExecutionMode.HYBRID)
        assert store.get_frame_metrics().execution_mode is ExecutionMode.HYBRID

    def test_reset_metrics(self, pipeline):
        pipeline.process(_gradient_frame())
        pipeline._drop_count = 4
        pipeline.reset_metrics()
        assert pipeline.tracker.frame_count == 0
        assert pipeline.drop_count == 0


class TestApplyConfig:
    def test_hot_swap_selection(self, pipeline, config):
        new_config = AppConfig(
            pipeline={"scale_factor": 1, "filter": "sobel_edge", "execution_mode": "gpu"},
            compositor={"rotation_degrees": 90},
        )
        pipeline.apply_config(config, new_config)
        assert pipeline.filter_type is FilterType.SOBEL_EDGE
        assert pipeline.execution_mode is ExecutionMode.GPU
        assert pipeline.scale_factor == 1
        assert pipeline.compositor.rotation_degrees == 90

    def test_window_size_change_replaces_tracker(self, pipeline, config):
        pipeline.process(_gradient_frame())
        old_tracker = pipeline.tracker
        new_config = AppConfig(metrics={"window_size": 60})
        pipeline.apply_config(config, new_config)
        assert pipeline.tracker is not old_tracker
        assert pipeline.tracker.window_size == 60
        assert pipeline.tracker.frame_count == 0

    def test_same_window_size_keeps_tracker(self, pipeline, config):
        pipeline.process(_gradient_frame())
        old_tracker = pipeline.tracker
        pipeline.apply_config(config, AppConfig(pipeline={"filter": "EMBOSS"}))
        assert pipeline.tracker is old_tracker
        assert pipeline.tracker.frame_count == 1
