"""
ARGB 32비트 픽셀 패킹/언패킹 헬퍼입니다.

레이아웃: A<<24 | R<<16 | G<<8 | B (알파는 항상 0xFF)
"""

from __future__ import annotations

import numpy as np

OPAQUE_ALPHA = np.uint32(0xFF000000)
OPAQUE_BLACK = OPAQUE_ALPHA


def pack_argb(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """0~255 범위의 R/G/B 채널 배열을 불투명 ARGB uint32 배열로 패킹합니다."""
    return (
        OPAQUE_ALPHA
        | (r.astype(np.uint32) << np.uint32(16))
        | (g.astype(np.uint32) << np.uint32(8))
        | b.astype(np.uint32)
    )


def unpack_rgb(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """ARGB uint32 배열을 int32 R/G/B 채널 배열로 분리합니다."""
    r = ((pixels >> np.uint32(16)) & np.uint32(0xFF)).astype(np.int32)
    g = ((pixels >> np.uint32(8)) & np.uint32(0xFF)).astype(np.int32)
    b = (pixels & np.uint32(0xFF)).astype(np.int32)
    return r, g, b


def luma(pixels: np.ndarray) -> np.ndarray:
    """정수 가중치 (77R + 150G + 29B) >> 8 로 휘도 맵을 계산합니다."""
    r, g, b = unpack_rgb(pixels)
    return (77 * r + 150 * g + 29 * b) >> 8
