"""
고정 컨볼루션 커널 정의입니다.
"""

from __future__ import annotations

from src.filters import FilterType, Kernel

# 5x5 이항 근사 가우시안 (가중치 합 256)
GAUSSIAN_5X5 = Kernel(
    weights=(
        (1, 4, 6, 4, 1),
        (4, 16, 24, 16, 4),
        (6, 24, 36, 24, 6),
        (4, 16, 24, 16, 4),
        (1, 4, 6, 4, 1),
    ),
    divisor=256,
)

SHARPEN_3X3 = Kernel(
    weights=(
        (0, -1, 0),
        (-1, 5, -1),
        (0, -1, 0),
    ),
)

# 부호 있는 결과를 중간 회색(128) 주변으로 이동
EMBOSS_3X3 = Kernel(
    weights=(
        (-2, -1, 0),
        (-1, 1, 1),
        (0, 1, 2),
    ),
    bias=128,
)

KERNELS: dict[FilterType, Kernel] = {
    FilterType.GAUSSIAN_BLUR: GAUSSIAN_5X5,
    FilterType.SHARPEN: SHARPEN_3X3,
    FilterType.EMBOSS: EMBOSS_3X3,
}
