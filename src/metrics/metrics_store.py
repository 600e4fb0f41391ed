"""
공유 메트릭 저장소 모듈입니다.

역할:
- 파이프라인이 발행한 최신 FrameMetrics 스냅샷을 보관하는 thread-safe 저장소
- 대시보드가 폴링하여 현재 파이프라인 상태를 표시

사용 예시:
    >>> store = MetricsStore()
    >>> store.update_frame_metrics(pipeline.snapshot())
    >>> metrics = store.get_frame_metrics()
"""

from __future__ import annotations

import threading
import time
from dataclasses import replace

from src.metrics import FrameMetrics


class MetricsStore:
    """
    파이프라인 메트릭을 중앙에서 관리하는 thread-safe 저장소입니다.

    파이프라인 작업 스레드가 쓰고 대시보드(UI 스레드)가 읽으므로
    모든 공개 메서드는 RLock으로 보호되며, 조회는 복사본을 반환합니다.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._frame_metrics = FrameMetrics()
        self._updated_at_ns: int = 0

    def update_frame_metrics(self, metrics: FrameMetrics) -> None:
        """최신 성능 스냅샷을 저장합니다."""
        with self._lock:
            self._frame_metrics = replace(metrics)
            self._updated_at_ns = time.time_ns()

    def get_frame_metrics(self) -> FrameMetrics:
        """최신 성능 스냅샷의 복사본을 반환합니다."""
        with self._lock:
            return replace(self._frame_metrics)

    @property
    def updated_at_ns(self) -> int:
        """마지막 갱신 시각 (time.time_ns 기준, 갱신 전에는 0)입니다."""
        with self._lock:
            return self._updated_at_ns
