"""
필터 뱅크 모듈 패키지

공통 데이터 타입:
- FilterType: 선택 가능한 필터 열거형 (순환 선택 지원)
- Kernel: 불변 정수 컨볼루션 커널 (가중치 + 제수 + 바이어스)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FilterType(Enum):
    """
    픽셀/이웃 픽셀 단위 필터 종류입니다.

    값은 대시보드 표시 이름입니다.
    """
    NONE = "No Filter"
    GRAYSCALE = "Grayscale"
    SOBEL_EDGE = "Sobel Edge"
    GAUSSIAN_BLUR = "Gaussian 5x5"
    SHARPEN = "Sharpen"
    EMBOSS = "Emboss"

    @property
    def display_name(self) -> str:
        return self.value

    def next(self) -> "FilterType":
        """선언 순서상 다음 필터를 반환합니다 (마지막 다음은 처음)."""
        members = list(FilterType)
        return members[(members.index(self) + 1) % len(members)]

    @classmethod
    def parse(cls, name: str) -> "FilterType":
        """멤버 이름(대소문자 무관)으로 FilterType을 찾습니다."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"알 수 없는 필터 이름: '{name}'") from None


@dataclass(frozen=True)
class Kernel:
    """
    정사각 홀수 크기 정수 컨볼루션 커널입니다.

    출력 채널 = clamp(trunc(sum(weight * channel) / divisor) + bias, 0, 255)

    필드:
        weights: 행 단위 정수 가중치 튜플
        divisor: 정수 제수 (0 불가)
        bias: 정수 바이어스
    """
    weights: tuple[tuple[int, ...], ...]
    divisor: int = 1
    bias: int = 0

    def __post_init__(self) -> None:
        size = len(self.weights)
        if size == 0 or size % 2 == 0:
            raise ValueError(f"커널 크기는 홀수여야 합니다: {size}")
        if any(len(row) != size for row in self.weights):
            raise ValueError("커널은 정사각 행렬이어야 합니다")
        if self.divisor == 0:
            raise ValueError("커널 제수는 0일 수 없습니다")

    @property
    def size(self) -> int:
        return len(self.weights)

    @property
    def radius(self) -> int:
        return self.size // 2
