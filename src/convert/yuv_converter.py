"""
YUV 4:2:0 → ARGB 색 공간 변환 모듈입니다.

역할:
- 평면(Y/U/V) 프레임을 32비트 ARGB 패킹 버퍼로 변환
- 변환과 동시에 정수 배율 다운스케일 (포인트 샘플링, 보간 없음)
- 행/픽셀 stride 및 인터리브 크로마 지원

변환식 (U, V는 -128 오프셋 적용):
    R = Y + trunc(1.370705 * V)
    G = Y - trunc(0.337633 * U) - trunc(0.698001 * V)
    B = Y + trunc(1.732446 * U)

각 항은 float32 곱셈 후 0 방향으로 절삭하고, 합산 결과를 [0, 255]로 클램프합니다.
참조 스칼라 경로와 비트 단위로 같은 결과를 내야 하므로 계수와 연산 순서를 바꾸지 마십시오.

사용 예시:
    >>> packed = yuv_to_argb_scaled(planar_frame, scale_factor=2)
    >>> packed.width, packed.height
    (640, 360)
"""

from __future__ import annotations

import logging

import numpy as np

from src.capture import PackedFrame, PlanarFrame
from src.convert.packing import pack_argb

logger = logging.getLogger(__name__)

# 변환 계수 (float32)
COEFF_R_V = np.float32(1.370705)
COEFF_G_U = np.float32(0.337633)
COEFF_G_V = np.float32(0.698001)
COEFF_B_U = np.float32(1.732446)

CHROMA_OFFSET = 128


def _scaled_term(coefficient: np.float32, chroma: np.ndarray) -> np.ndarray:
    """float32 곱셈 후 0 방향 절삭한 int32 항을 반환합니다."""
    return (coefficient * chroma.astype(np.float32)).astype(np.int32)


def yuv_to_argb_scaled(frame: PlanarFrame, scale_factor: int = 2) -> PackedFrame:
    """
    YUV 4:2:0 평면 프레임을 다운스케일하며 ARGB 패킹 프레임으로 변환합니다.

    출력 크기는 (width // scale_factor) x (height // scale_factor)이며,
    목적지 픽셀 (dx, dy)는 원본 (dx * f, dy * f) 위치 하나만 샘플링합니다.
    V 평면은 U 평면의 row_stride/pixel_stride로 주소를 계산합니다
    (PlanarFrame이 두 평면의 stride 일치를 보장).

    파라미터:
        frame: 검증된 PlanarFrame
        scale_factor: 정수 다운스케일 배율 (>= 1)

    반환값:
        PackedFrame: 불투명 ARGB 프레임

    에러:
        ValueError: scale_factor < 1
    """
    if scale_factor < 1:
        raise ValueError(f"scale_factor는 1 이상이어야 합니다: {scale_factor}")

    dst_width = frame.width // scale_factor
    dst_height = frame.height // scale_factor

    src_y = np.arange(dst_height, dtype=np.int64) * scale_factor
    src_x = np.arange(dst_width, dtype=np.int64) * scale_factor

    y_index = src_y[:, None] * frame.y.row_stride + src_x[None, :]
    uv_index = (
        (src_y[:, None] // 2) * frame.u.row_stride
        + (src_x[None, :] // 2) * frame.u.pixel_stride
    )

    y_val = frame.y.data[y_index].astype(np.int32)
    u_val = frame.u.data[uv_index].astype(np.int32) - CHROMA_OFFSET
    v_val = frame.v.data[uv_index].astype(np.int32) - CHROMA_OFFSET

    r = y_val + _scaled_term(COEFF_R_V, v_val)
    g = y_val - _scaled_term(COEFF_G_U, u_val) - _scaled_term(COEFF_G_V, v_val)
    b = y_val + _scaled_term(COEFF_B_U, u_val)

    pixels = pack_argb(
        np.clip(r, 0, 255),
        np.clip(g, 0, 255),
        np.clip(b, 0, 255),
    )
    return PackedFrame(pixels=pixels, width=dst_width, height=dst_height)
