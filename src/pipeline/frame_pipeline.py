"""
프레임 파이프라인 오케스트레이터 모듈입니다.

역할:
- 프레임 하나를 3단계로 처리하고 단계별 시간을 측정
    1단계: YUV 4:2:0 → ARGB 변환 + 다운스케일 (yuv_ms)
    2단계: 선택된 필터 적용 (filter_ms)
    3단계: 표시용 BGR 이미지 합성 (display_ms)
- 처리 중에 도착한 프레임은 버리고 drop_count 증가 (한 번에 한 프레임만 처리)
- PerformanceTracker에 샘플 기록, MetricsStore에 스냅샷 발행
- 필터/실행 모드 선택 및 설정 핫스왑

파이프라인 구조:
    [FrameSource] ──PlanarFrame──▶ process()
                                     │ resolve_backend(mode)
                                     ▼
                    backend.convert → backend.process → compositor.compose
                                     │
                                     ├─▶ PerformanceTracker.record()
                                     └─▶ MetricsStore.update_frame_metrics()

사용 예시:
    >>> pipeline = FramePipeline(config)
    >>> result = pipeline.process(source.read())
    >>> pipeline.cycle_filter()
    >>> pipeline.snapshot().fps
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from src.capture import PackedFrame, PlanarFrame
from src.compositor.frame_compositor import FrameCompositor
from src.config.schema import AppConfig
from src.filters import FilterType
from src.filters.backend import ExecutionMode, resolve_backend
from src.metrics import FrameMetrics, TimingField, TimingSample
from src.metrics.metrics_store import MetricsStore
from src.metrics.performance_tracker import PerformanceTracker

logger = logging.getLogger(__name__)

# ARGB 패킹 픽셀 하나의 바이트 수
BYTES_PER_PIXEL = 4
_BYTES_PER_MB = 1024 * 1024


def _elapsed_ms(start_ns: int, end_ns: int) -> float:
    return max(0, end_ns - start_ns) / 1_000_000


@dataclass
class PipelineResult:
    """
    프레임 하나의 처리 결과입니다.

    필드:
        frame: 필터까지 적용된 ARGB 프레임
        image: 표시용 BGR 이미지 (회전 적용)
        sample: 단계별 지연시간
    """
    frame: PackedFrame
    image: np.ndarray
    sample: TimingSample


class FramePipeline:
    """
    변환 → 필터 → 합성 단계를 실행하고 성능을 기록하는 오케스트레이터입니다.

    process()는 여러 스레드에서 호출될 수 있지만, 실제 처리는 한 번에 한 프레임만
    진행됩니다. 이 보장 덕분에 PerformanceTracker는 내부 락 없이 사용됩니다.
    """

    def __init__(
        self,
        config: AppConfig,
        tracker: Optional[PerformanceTracker] = None,
        compositor: Optional[FrameCompositor] = None,
        metrics_store: Optional[MetricsStore] = None,
    ) -> None:
        self._config = config
        self._filter_type = FilterType.parse(config.pipeline.filter)
        self._execution_mode = ExecutionMode.parse(config.pipeline.execution_mode)
        self._scale_factor = config.pipeline.scale_factor

        self._tracker = tracker or PerformanceTracker(window_size=config.metrics.window_size)
        self._compositor = compositor or FrameCompositor(config)
        self._metrics_store = metrics_store or MetricsStore()

        # 처리 중 플래그 (비차단 획득 실패 = 프레임 드롭)
        self._in_flight = threading.Lock()
        self._drop_count = 0
        self._last_width = 0
        self._last_height = 0

        logger.info(
            f"FramePipeline 초기화 완료: filter={self._filter_type.name}, "
            f"mode={self._execution_mode.name}, scale={self._scale_factor}, "
            f"window={self._tracker.window_size}"
        )

    # =========================================================================
    # 프로퍼티
    # =========================================================================

    @property
    def filter_type(self) -> FilterType:
        return self._filter_type

    @property
    def execution_mode(self) -> ExecutionMode:
        return self._execution_mode

    @property
    def scale_factor(self) -> int:
        return self._scale_factor

    @property
    def tracker(self) -> PerformanceTracker:
        return self._tracker

    @property
    def metrics_store(self) -> MetricsStore:
        return self._metrics_store

    @property
    def compositor(self) -> FrameCompositor:
        return self._compositor

    @property
    def drop_count(self) -> int:
        return self._drop_count

    # =========================================================================
    # 프레임 처리
    # =========================================================================

    def process(
        self, frame: PlanarFrame, capture_ns: Optional[int] = None
    ) -> Optional[PipelineResult]:
        """
        프레임 하나를 3단계로 처리합니다.

        파라미터:
            frame: 입력 YUV 4:2:0 프레임
            capture_ns: 캡처 시각 (perf_counter_ns 기준). None이면 1단계 시작 시각

        반환값:
            PipelineResult, 이전 프레임이 아직 처리 중이면 None (드롭)

        에러:
            변환/필터/합성 단계에서 발생한 예외는 로깅 후 그대로 전파됩니다.
        """
        if not self._in_flight.acquire(blocking=False):
            self._drop_count += 1
            logger.debug(f"처리 중 프레임 드롭: drop_count={self._drop_count}")
            return None

        try:
            return self._run_stages(frame, capture_ns)
        except Exception as exc:
            logger.error(f"프레임 처리 실패: {exc}", exc_info=True)
            raise
        finally:
            self._in_flight.release()

    def _run_stages(self, frame: PlanarFrame, capture_ns: Optional[int]) -> PipelineResult:
        backend = resolve_backend(self._execution_mode)
        filter_type = self._filter_type

        # 1단계: YUV → ARGB
        yuv_start = time.perf_counter_ns()
        packed = backend.convert(frame, self._scale_factor)
        yuv_end = time.perf_counter_ns()

        # 2단계: 필터
        filtered = backend.process(packed, filter_type)
        filter_end = time.perf_counter_ns()

        # 3단계: 합성
        image = self._compositor.compose(filtered)
        display_end = time.perf_counter_ns()

        yuv_ms = _elapsed_ms(yuv_start, yuv_end)
        filter_ms = _elapsed_ms(yuv_end, filter_end)
        display_ms = _elapsed_ms(filter_end, display_end)
        start_ns = yuv_start if capture_ns is None else capture_ns

        sample = TimingSample(
            yuv_ms=yuv_ms,
            filter_ms=filter_ms,
            display_ms=display_ms,
            process_ms=yuv_ms + filter_ms + display_ms,
            end_to_end_ms=_elapsed_ms(start_ns, display_end),
        )
        self._tracker.record(sample)
        self._last_width = filtered.width
        self._last_height = filtered.height

        self._metrics_store.update_frame_metrics(self.snapshot())
        logger.debug(
            f"프레임 처리 완료: {filtered.width}x{filtered.height}, "
            f"filter={filter_type.name}, process={sample.process_ms:.2f}ms"
        )
        return PipelineResult(frame=filtered, image=image, sample=sample)

    # =========================================================================
    # 조회
    # =========================================================================

    def snapshot(self) -> FrameMetrics:
        """현재 롤링 윈도우 기준 성능 스냅샷을 만듭니다."""
        fps = self._tracker.frame_rate()
        frame_bytes = self._last_width * self._last_height * BYTES_PER_PIXEL
        return FrameMetrics(
            fps=fps,
            process_latency_ms=self._tracker.average(TimingField.PROCESS),
            end_to_end_latency_ms=self._tracker.average(TimingField.END_TO_END),
            yuv_latency_ms=self._tracker.average(TimingField.YUV),
            filter_latency_ms=self._tracker.average(TimingField.FILTER),
            display_latency_ms=self._tracker.average(TimingField.DISPLAY),
            frame_width=self._last_width,
            frame_height=self._last_height,
            frame_count=self._tracker.frame_count,
            drop_count=self._drop_count,
            execution_mode=self._execution_mode,
            filter_type=self._filter_type,
            throughput_mb_s=frame_bytes * fps / _BYTES_PER_MB,
        )

    # =========================================================================
    # 제어
    # =========================================================================

    def set_filter(self, filter_type: FilterType) -> None:
        """다음 프레임부터 적용할 필터를 지정합니다."""
        self._filter_type = filter_type
        logger.info(f"필터 변경: {filter_type.display_name}")
        self._publish()

    def set_mode(self, mode: ExecutionMode) -> None:
        """다음 프레임부터 적용할 실행 모드를 지정합니다."""
        self._execution_mode = mode
        logger.info(f"실행 모드 변경: {mode.display_name}")
        self._publish()

    def cycle_filter(self) -> FilterType:
        """필터를 다음 항목으로 순환하고 새 필터를 반환합니다."""
        self.set_filter(self._filter_type.next())
        return self._filter_type

    def cycle_mode(self) -> ExecutionMode:
        """실행 모드를 다음 항목으로 순환하고 새 모드를 반환합니다."""
        self.set_mode(self._execution_mode.next())
        return self._execution_mode

    def reset_metrics(self) -> None:
        """성능 이력과 드롭 카운트를 초기화합니다."""
        # 처리 중인 프레임이 끝난 뒤 초기화
        with self._in_flight:
            self._tracker.reset()
            self._drop_count = 0
        logger.info("성능 메트릭 초기화")
        self._publish()

    def apply_config(self, old_config: AppConfig, new_config: AppConfig) -> None:
        """
        설정 변경을 즉시 적용합니다 (핫스왑).

        ConfigManager.subscribe()에 콜백으로 등록되어 파일 변경 시 자동 호출됩니다.

        적용 범위:
        - 필터, 실행 모드, 스케일 배율
        - metrics.window_size 변경 시 새 PerformanceTracker로 교체 (이력 초기화)
        - FrameCompositor 회전 설정

        파라미터:
            old_config: 이전 설정 객체
            new_config: 새 설정 객체
        """
        self._config = new_config
        self._filter_type = FilterType.parse(new_config.pipeline.filter)
        self._execution_mode = ExecutionMode.parse(new_config.pipeline.execution_mode)
        self._scale_factor = new_config.pipeline.scale_factor

        if old_config.metrics.window_size != new_config.metrics.window_size:
            # 처리 중인 프레임이 끝난 뒤 교체
            with self._in_flight:
                self._tracker = PerformanceTracker(window_size=new_config.metrics.window_size)
            logger.info(f"PerformanceTracker 교체: window_size={new_config.metrics.window_size}")

        self._compositor.update_config(new_config)
        logger.info("파이프라인 설정 핫스왑 완료")
        self._publish()

    def _publish(self) -> None:
        self._metrics_store.update_frame_metrics(self.snapshot())
