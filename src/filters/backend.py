"""
실행 모드 → 필터 백엔드 매핑(capability table) 모듈입니다.

역할:
- ExecutionMode 열거형 (BASELINE / SIMD / GPU / HYBRID, 순환 선택)
- FilterBackend: 변환 + 필터 함수 쌍을 묶은 불변 레코드
- CAPABILITY_TABLE: 모드별 백엔드와 단계별 하드웨어 라벨

현재 구현된 백엔드는 스칼라 기준 경로(SCALAR_BACKEND) 하나이며, 네 모드 모두
이 백엔드로 연결됩니다. 필터 코드는 모드를 알지 못하고, 모드 선택은
파이프라인이 resolve_backend()로 백엔드를 고르는 지점에서만 일어납니다.
가속 백엔드는 같은 시그니처의 convert/process 함수를 가진 FilterBackend를
추가하고 테이블 항목만 바꾸면 됩니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from src.capture import PackedFrame, PlanarFrame
from src.convert.yuv_converter import yuv_to_argb_scaled
from src.filters import FilterType
from src.filters.baseline_processor import process_frame

ConvertFn = Callable[[PlanarFrame, int], PackedFrame]
ProcessFn = Callable[[PackedFrame, FilterType], PackedFrame]


class ExecutionMode(Enum):
    """파이프라인 실행 모드입니다. 값은 대시보드 표시 이름입니다."""
    BASELINE = "BASELINE"
    SIMD = "SIMD"
    GPU = "GPU"
    HYBRID = "HYBRID"

    @property
    def display_name(self) -> str:
        return self.value

    def next(self) -> "ExecutionMode":
        """선언 순서상 다음 모드를 반환합니다 (마지막 다음은 처음)."""
        members = list(ExecutionMode)
        return members[(members.index(self) + 1) % len(members)]

    @classmethod
    def parse(cls, name: str) -> "ExecutionMode":
        """멤버 이름(대소문자 무관)으로 ExecutionMode를 찾습니다."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"알 수 없는 실행 모드: '{name}'") from None


@dataclass(frozen=True)
class FilterBackend:
    """
    하나의 계산 경로를 나타내는 백엔드 레코드입니다.

    필드:
        name: 백엔드 식별자
        convert: (PlanarFrame, scale_factor) -> PackedFrame
        process: (PackedFrame, FilterType) -> PackedFrame
    """
    name: str
    convert: ConvertFn
    process: ProcessFn


@dataclass(frozen=True)
class BackendCapability:
    """
    실행 모드 하나에 대한 백엔드 및 단계별 하드웨어 라벨입니다.

    필드:
        backend: 실제로 실행할 백엔드
        yuv_hardware: 1단계(YUV→ARGB) 하드웨어 라벨
        filter_hardware: 2단계(필터) 하드웨어 라벨
        display_hardware: 3단계(합성/표시) 하드웨어 라벨
        simd_active: SIMD 경로 활성 표시
        gpu_active: GPU 경로 활성 표시
    """
    backend: FilterBackend
    yuv_hardware: str
    filter_hardware: str
    display_hardware: str
    simd_active: bool = False
    gpu_active: bool = False


SCALAR_BACKEND = FilterBackend(
    name="scalar",
    convert=yuv_to_argb_scaled,
    process=process_frame,
)

# TODO: SIMD/GPU/HYBRID 가속 백엔드가 추가되면 각 항목의 backend를 교체
CAPABILITY_TABLE: dict[ExecutionMode, BackendCapability] = {
    ExecutionMode.BASELINE: BackendCapability(
        backend=SCALAR_BACKEND,
        yuv_hardware="[CPU Scalar]",
        filter_hardware="[CPU Scalar]",
        display_hardware="[CPU+GPU]",
    ),
    ExecutionMode.SIMD: BackendCapability(
        backend=SCALAR_BACKEND,
        yuv_hardware="[CPU NEON]",
        filter_hardware="[CPU NEON]",
        display_hardware="[CPU+GPU]",
        simd_active=True,
    ),
    ExecutionMode.GPU: BackendCapability(
        backend=SCALAR_BACKEND,
        yuv_hardware="[CPU Scalar]",
        filter_hardware="[GPU Shader]",
        display_hardware="[GPU]",
        gpu_active=True,
    ),
    ExecutionMode.HYBRID: BackendCapability(
        backend=SCALAR_BACKEND,
        yuv_hardware="[CPU NEON]",
        filter_hardware="[NEON+GPU]",
        display_hardware="[GPU]",
        simd_active=True,
        gpu_active=True,
    ),
}


def resolve_capability(mode: ExecutionMode) -> BackendCapability:
    """실행 모드의 capability 항목을 반환합니다."""
    return CAPABILITY_TABLE[mode]


def resolve_backend(mode: ExecutionMode) -> FilterBackend:
    """실행 모드가 사용할 백엔드를 반환합니다."""
    return CAPABILITY_TABLE[mode].backend
