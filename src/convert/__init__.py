"""
색 공간 변환 모듈 패키지

- yuv_to_argb_scaled: YUV 4:2:0 평면 프레임 → ARGB 패킹 프레임 (정수 다운스케일)
- pack_argb / unpack_rgb / luma: 32비트 ARGB 픽셀 헬퍼
"""

from src.convert.packing import OPAQUE_ALPHA, OPAQUE_BLACK, luma, pack_argb, unpack_rgb
from src.convert.yuv_converter import yuv_to_argb_scaled

__all__ = [
    "OPAQUE_ALPHA",
    "OPAQUE_BLACK",
    "luma",
    "pack_argb",
    "unpack_rgb",
    "yuv_to_argb_scaled",
]
