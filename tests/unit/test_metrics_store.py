"""
MetricsStore 단위 테스트
"""

from __future__ import annotations

import threading

from src.filters import FilterType
from src.filters.backend import ExecutionMode
from src.metrics import FrameMetrics
from src.metrics.metrics_store import MetricsStore


class TestMetricsStore:
    def test_initial_snapshot_is_empty(self):
        store = MetricsStore()
        metrics = store.get_frame_metrics()
        assert metrics.fps == 0.0
        assert metrics.frame_count == 0
        assert store.updated_at_ns == 0

    def test_update_and_get(self):
        store = MetricsStore()
        store.update_frame_metrics(
            FrameMetrics(fps=29.5, frame_count=12, execution_mode=ExecutionMode.GPU,
                         filter_type=FilterType.EMBOSS)
        )
        metrics = store.get_frame_metrics()
        assert metrics.fps == 29.5
        assert metrics.execution_mode is ExecutionMode.GPU
        assert metrics.filter_type is FilterType.EMBOSS
        assert store.updated_at_ns > 0

    def test_get_returns_copy(self):
        store = MetricsStore()
        store.update_frame_metrics(FrameMetrics(drop_count=3))
        first = store.get_frame_metrics()
        first.drop_count = 99
        assert store.get_frame_metrics().drop_count == 3

    def test_update_stores_copy(self):
        store = MetricsStore()
        metrics = FrameMetrics(frame_count=1)
        store.update_frame_metrics(metrics)
        metrics.frame_count = 50
        assert store.get_frame_metrics().frame_count == 1

    def test_concurrent_updates(self):
        store = MetricsStore()

        def _writer(offset: int) -> None:
            for i in range(200):
                store.update_frame_metrics(FrameMetrics(frame_count=offset + i))

        threads = [threading.Thread(target=_writer, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_frame_metrics().frame_count % 1000 == 199
