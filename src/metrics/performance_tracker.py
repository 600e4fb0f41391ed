"""
롤링 윈도우 성능 추적 모듈입니다.

역할:
- 최근 N개 프레임(기본 30)의 단계별 지연시간을 고정 크기 원형 버퍼에 기록
- 유효 샘플 기준 평균 지연시간 및 순간 프레임레이트 계산
- reset()으로 이력 초기화 (용량 유지)
- 현재 윈도우를 CSV 파일로 내보내기

원형 버퍼 인덱스 규칙:
- 누적 카운트 count 는 reset 전까지 단조 증가
- 새 샘플 위치 = count % window_size, 기록 후 newest 가 그 위치를 가리킴
- 버퍼가 찬 뒤 가장 오래된 유효 슬롯 = (newest + 1) % window_size, 그 전에는 0

동기화:
    내부 락이 없습니다. record()/reset()은 한 번에 하나의 실행 컨텍스트에서만
    호출해야 하며, FramePipeline이 한 번에 한 프레임만 처리하도록 보장합니다.

사용 예시:
    >>> tracker = PerformanceTracker(window_size=30)
    >>> tracker.record(TimingSample(yuv_ms=3.2, filter_ms=8.1, display_ms=1.0,
    ...                             process_ms=12.3, end_to_end_ms=15.0))
    >>> tracker.average(TimingField.FILTER)
    8.1
"""

from __future__ import annotations

import csv
import logging
import time
from pathlib import Path
from typing import Callable

import numpy as np

from src.metrics import TimingField, TimingSample

logger = logging.getLogger(__name__)

_FIELDS: tuple[TimingField, ...] = tuple(TimingField)
_FIELD_COLUMN: dict[TimingField, int] = {f: i for i, f in enumerate(_FIELDS)}


class PerformanceTracker:
    """
    고정 용량 원형 버퍼 기반 프레임 성능 추적기입니다.

    capture 시각은 호출자가 넘기지 않고 record() 시점에 내부 시계로 기록합니다.
    따라서 frame_rate()는 record() 호출 간 벽시계 간격을 반영합니다.
    """

    def __init__(
        self,
        window_size: int = 30,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        """
        파라미터:
            window_size: 원형 버퍼 용량 (>= 1)
            clock: 나노초 단위 단조 시계
        """
        if window_size < 1:
            raise ValueError(f"window_size는 1 이상이어야 합니다: {window_size}")

        self._window_size = window_size
        self._clock = clock
        self._capture_ns = np.zeros(window_size, dtype=np.int64)
        self._samples = np.zeros((window_size, len(_FIELDS)), dtype=np.float64)
        self._newest = 0
        self._count = 0

        logger.debug(f"PerformanceTracker 초기화: window_size={window_size}")

    # =========================================================================
    # 기록
    # =========================================================================

    def record(self, sample: TimingSample) -> None:
        """샘플을 기록합니다. 버퍼가 가득 차면 가장 오래된 슬롯을 덮어씁니다."""
        position = self._count % self._window_size

        self._capture_ns[position] = self._clock()
        self._samples[position] = [sample.get(f) for f in _FIELDS]

        self._newest = position
        self._count += 1

    def reset(self) -> None:
        """모든 이력을 버립니다. 용량은 유지됩니다."""
        self._count = 0
        self._newest = 0
        logger.info(f"PerformanceTracker 초기화(reset): window_size={self._window_size}")

    # =========================================================================
    # 조회
    # =========================================================================

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def frame_count(self) -> int:
        """마지막 reset 이후 누적 기록 수입니다."""
        return self._count

    @property
    def valid_count(self) -> int:
        """현재 윈도우에 있는 유효 샘플 수입니다."""
        return min(self._count, self._window_size)

    def frame_rate(self) -> float:
        """
        유효 샘플 중 가장 오래된 것과 최신 것 사이의 프레임레이트를 반환합니다.

        (valid_count - 1) / 경과 초. 샘플이 2개 미만이거나 경과 시간이 0 이하이면 0.0
        """
        valid = self.valid_count
        if valid < 2:
            return 0.0

        newest_ns = int(self._capture_ns[self._newest])
        oldest_ns = int(self._capture_ns[self._oldest_index()])
        elapsed_sec = (newest_ns - oldest_ns) / 1_000_000_000
        if elapsed_sec <= 0:
            return 0.0
        return (valid - 1) / elapsed_sec

    def average(self, timing_field: TimingField) -> float:
        """유효 샘플에 대한 항목 평균을 반환합니다. 비어 있으면 0.0"""
        valid = self.valid_count
        if valid == 0:
            return 0.0
        # 버퍼가 차기 전에는 0..count-1, 찬 뒤에는 전체 슬롯이 유효
        column = self._samples[:valid, _FIELD_COLUMN[timing_field]]
        return float(column.mean())

    def samples(self) -> list[tuple[int, TimingSample]]:
        """유효 샘플을 오래된 순서로 (capture_ns, TimingSample) 목록으로 반환합니다."""
        result = []
        for index in self._chronological_indices():
            row = self._samples[index]
            sample = TimingSample(**{f.value: float(row[i]) for i, f in enumerate(_FIELDS)})
            result.append((int(self._capture_ns[index]), sample))
        return result

    def export_csv(self, filepath: str | Path) -> None:
        """
        현재 윈도우의 유효 샘플을 오래된 순서로 CSV 파일에 저장합니다.

        CSV 컬럼:
            capture_ns, yuv_ms, filter_ms, display_ms, process_ms, end_to_end_ms
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        rows = self.samples()

        try:
            with open(filepath, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(["capture_ns"] + [field.value for field in _FIELDS])
                for capture_ns, sample in rows:
                    writer.writerow(
                        [capture_ns] + [f"{sample.get(field):.3f}" for field in _FIELDS]
                    )

            logger.info(f"성능 CSV 저장 완료: {filepath} ({len(rows)}개 샘플)")

        except OSError as exc:
            logger.error(f"성능 CSV 저장 실패: {exc}")
            raise

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    def _oldest_index(self) -> int:
        if self._count >= self._window_size:
            return (self._newest + 1) % self._window_size
        return 0

    def _chronological_indices(self) -> list[int]:
        oldest = self._oldest_index()
        return [(oldest + i) % self._window_size for i in range(self.valid_count)]
