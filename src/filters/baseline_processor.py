"""
기준(스칼라 CPU) 필터 처리 모듈입니다.

역할:
- ARGB 패킹 프레임에 6종 필터 중 하나를 적용하여 같은 크기의 새 프레임 반환
- 그레이스케일 / 소벨 엣지 / 범용 정수 컨볼루션(블러, 샤픈, 엠보스)
- 경계 처리 규칙:
  - 소벨: 바깥 1픽셀 테두리는 불투명 검정
  - 컨볼루션: 커널 반경 안쪽 테두리는 원본 픽셀을 그대로 복사

입력 버퍼는 변경하지 않으며 호출마다 새 출력 버퍼를 할당합니다.
이 모듈의 결과가 정확도 기준(reference)이므로, 다른 백엔드는 이 결과와
비트 단위로 일치해야 합니다.

사용 예시:
    >>> out = process_frame(packed, FilterType.SOBEL_EDGE)
"""

from __future__ import annotations

import logging

import numpy as np

from src.capture import PackedFrame
from src.convert.packing import OPAQUE_BLACK, luma, pack_argb, unpack_rgb
from src.filters import FilterType, Kernel
from src.filters.kernels import KERNELS

logger = logging.getLogger(__name__)


def process_frame(frame: PackedFrame, filter_type: FilterType) -> PackedFrame:
    """
    선택된 필터를 적용한 새 프레임을 반환합니다.

    파라미터:
        frame: 입력 ARGB 프레임 (변경되지 않음)
        filter_type: 적용할 필터

    반환값:
        PackedFrame: 입력과 같은 크기의 새 프레임
    """
    if filter_type is FilterType.NONE:
        return frame.copy()
    if filter_type is FilterType.GRAYSCALE:
        return apply_grayscale(frame)
    if filter_type is FilterType.SOBEL_EDGE:
        return apply_sobel_edge(frame)
    return apply_convolution(frame, KERNELS[filter_type])


# =========================================================================
# 그레이스케일
# =========================================================================

def apply_grayscale(frame: PackedFrame) -> PackedFrame:
    """각 픽셀을 (77R + 150G + 29B) >> 8 휘도의 회색으로 바꿉니다."""
    gray = luma(frame.pixels)
    return PackedFrame(
        pixels=pack_argb(gray, gray, gray),
        width=frame.width,
        height=frame.height,
    )


# =========================================================================
# 소벨 엣지 검출
# =========================================================================

def apply_sobel_edge(frame: PackedFrame) -> PackedFrame:
    """
    소벨 연산자로 엣지 크기를 계산합니다.

    내부 픽셀: min(255, |Gx| + |Gy|) 회색
    바깥 1픽셀 테두리: 불투명 검정 (계산하지 않음)
    3x3 미만 프레임은 전체가 테두리이므로 모두 불투명 검정입니다.
    """
    height, width = frame.height, frame.width
    output = np.full((height, width), OPAQUE_BLACK, dtype=np.uint32)

    if height < 3 or width < 3:
        return PackedFrame(pixels=output, width=width, height=height)

    gray = luma(frame.pixels)

    top_left, top, top_right = gray[:-2, :-2], gray[:-2, 1:-1], gray[:-2, 2:]
    left, right = gray[1:-1, :-2], gray[1:-1, 2:]
    bottom_left, bottom, bottom_right = gray[2:, :-2], gray[2:, 1:-1], gray[2:, 2:]

    gx = (
        -top_left + top_right
        - 2 * left + 2 * right
        - bottom_left + bottom_right
    )
    gy = (
        -top_left - 2 * top - top_right
        + bottom_left + 2 * bottom + bottom_right
    )

    magnitude = np.minimum(255, np.abs(gx) + np.abs(gy))
    output[1:-1, 1:-1] = pack_argb(magnitude, magnitude, magnitude)
    return PackedFrame(pixels=output, width=width, height=height)


# =========================================================================
# 범용 컨볼루션
# =========================================================================

def _truncate_divide(total: np.ndarray, divisor: int) -> np.ndarray:
    """0 방향으로 절삭하는 정수 나눗셈입니다 (음수 합에도 반올림 없음)."""
    if divisor == 1:
        return total
    quotient = np.abs(total) // abs(divisor)
    return np.where((total < 0) != (divisor < 0), -quotient, quotient)


def _convolve_channel(channel: np.ndarray, kernel: Kernel) -> np.ndarray:
    """반경 안쪽 내부 영역에 대해 채널 하나의 가중합을 계산합니다."""
    radius = kernel.radius
    inner_height = channel.shape[0] - 2 * radius
    inner_width = channel.shape[1] - 2 * radius

    total = np.zeros((inner_height, inner_width), dtype=np.int64)
    for ky, row in enumerate(kernel.weights):
        for kx, weight in enumerate(row):
            if weight == 0:
                continue
            total += weight * channel[ky:ky + inner_height, kx:kx + inner_width]

    shifted = _truncate_divide(total, kernel.divisor) + kernel.bias
    return np.clip(shifted, 0, 255)


def apply_convolution(frame: PackedFrame, kernel: Kernel) -> PackedFrame:
    """
    R/G/B 채널별로 커널을 적용합니다.

    y, x 가 [r, dim - r) 범위인 픽셀만 컨볼루션하고, 나머지 테두리 픽셀은
    원본 값을 그대로 복사합니다. 프레임이 커널보다 작아 내부 영역이 비면
    출력은 입력의 복사본입니다.

    파라미터:
        frame: 입력 ARGB 프레임
        kernel: 적용할 커널

    반환값:
        PackedFrame: 컨볼루션 결과 프레임
    """
    radius = kernel.radius
    height, width = frame.height, frame.width
    output = frame.pixels.copy()

    if height <= 2 * radius or width <= 2 * radius:
        return PackedFrame(pixels=output, width=width, height=height)

    r, g, b = unpack_rgb(frame.pixels)
    output[radius:height - radius, radius:width - radius] = pack_argb(
        _convolve_channel(r, kernel),
        _convolve_channel(g, kernel),
        _convolve_channel(b, kernel),
    )
    return PackedFrame(pixels=output, width=width, height=height)
