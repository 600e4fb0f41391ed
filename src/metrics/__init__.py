"""
메트릭 모듈 패키지

공통 데이터 타입:
- TimingField: 프레임당 측정하는 5개 지연시간 항목
- TimingSample: 한 프레임의 단계별 지연시간 (밀리초)
- FrameMetrics: 대시보드 표시용 성능 스냅샷
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum

from src.filters import FilterType
from src.filters.backend import ExecutionMode


class TimingField(Enum):
    """TimingSample의 필드 이름과 1:1로 대응하는 측정 항목입니다."""
    YUV = "yuv_ms"
    FILTER = "filter_ms"
    DISPLAY = "display_ms"
    PROCESS = "process_ms"
    END_TO_END = "end_to_end_ms"


@dataclass(frozen=True)
class TimingSample:
    """
    한 프레임의 단계별 지연시간입니다. 모든 값은 0 이상이어야 합니다.

    필드:
        yuv_ms: 1단계 YUV → ARGB 변환 시간
        filter_ms: 2단계 필터 처리 시간
        display_ms: 3단계 합성/표시 준비 시간
        process_ms: 전체 처리 시간 (세 단계 합)
        end_to_end_ms: 캡처 시각부터 처리 완료까지 시간
    """
    yuv_ms: float = 0.0
    filter_ms: float = 0.0
    display_ms: float = 0.0
    process_ms: float = 0.0
    end_to_end_ms: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name}는 0 이상이어야 합니다: {value}")

    def get(self, timing_field: TimingField) -> float:
        """TimingField에 해당하는 값을 반환합니다."""
        return getattr(self, timing_field.value)


@dataclass
class FrameMetrics:
    """
    대시보드 표시용 성능 스냅샷입니다.

    필드:
        fps: 롤링 윈도우 기준 프레임레이트
        process_latency_ms: 평균 전체 처리 시간
        end_to_end_latency_ms: 평균 end-to-end 지연
        yuv_latency_ms / filter_latency_ms / display_latency_ms: 단계별 평균
        frame_width, frame_height: 마지막 처리 프레임 크기
        frame_count: 누적 처리 프레임 수
        drop_count: 처리 중이라 버려진 프레임 수
        execution_mode, filter_type: 현재 선택
        throughput_mb_s: 초당 처리 바이트 (ARGB 4바이트/픽셀, MB/s)
    """
    fps: float = 0.0
    process_latency_ms: float = 0.0
    end_to_end_latency_ms: float = 0.0
    yuv_latency_ms: float = 0.0
    filter_latency_ms: float = 0.0
    display_latency_ms: float = 0.0
    frame_width: int = 0
    frame_height: int = 0
    frame_count: int = 0
    drop_count: int = 0
    execution_mode: ExecutionMode = ExecutionMode.BASELINE
    filter_type: FilterType = FilterType.NONE
    throughput_mb_s: float = 0.0
