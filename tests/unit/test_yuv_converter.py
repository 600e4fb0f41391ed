"""
YUV → ARGB 변환 단위 테스트

검증 조건:
- 중립 크로마(U=V=128) 균일 프레임은 R=G=B=Y 회색 (Y=0, Y=255 포함)
- 출력 크기 = floor(W/f) x floor(H/f)
- 알려진 YUV 값의 정수 절삭 결과 일치
- 범위를 벗어나는 합은 [0, 255]로 클램프
- 행 stride 패딩 및 인터리브 크로마(pixel_stride=2) 지원
"""

from __future__ import annotations

import numpy as np
import pytest

from src.capture import FrameValidationError, Plane, PlanarFrame
from src.convert import unpack_rgb, yuv_to_argb_scaled


# =========================================================================
# 헬퍼
# =========================================================================

def _uniform_frame(
    width: int,
    height: int,
    y_value: int,
    u_value: int = 128,
    v_value: int = 128,
) -> PlanarFrame:
    chroma_w = (width + 1) // 2
    chroma_h = (height + 1) // 2
    return PlanarFrame(
        y=Plane(np.full(width * height, y_value, dtype=np.uint8), row_stride=width),
        u=Plane(np.full(chroma_w * chroma_h, u_value, dtype=np.uint8), row_stride=chroma_w),
        v=Plane(np.full(chroma_w * chroma_h, v_value, dtype=np.uint8), row_stride=chroma_w),
        width=width,
        height=height,
    )


# =========================================================================
# 색 변환
# =========================================================================

class TestNeutralChroma:
    @pytest.mark.parametrize("y_value", [0, 1, 77, 128, 254, 255])
    def test_uniform_gray(self, y_value):
        packed = yuv_to_argb_scaled(_uniform_frame(8, 6, y_value), scale_factor=1)
        r, g, b = unpack_rgb(packed.pixels)
        assert np.all(r == y_value)
        assert np.all(g == y_value)
        assert np.all(b == y_value)

    def test_alpha_is_opaque(self):
        packed = yuv_to_argb_scaled(_uniform_frame(8, 6, 90, 30, 220), scale_factor=1)
        assert np.all((packed.pixels >> np.uint32(24)) == 0xFF)


class TestKnownValues:
    def test_truncation_toward_zero(self):
        """Y=100, U=150, V=90 → R=48, G=119, B=138"""
        packed = yuv_to_argb_scaled(_uniform_frame(2, 2, 100, 150, 90), scale_factor=1)
        r, g, b = unpack_rgb(packed.pixels)
        assert int(r[0, 0]) == 48
        assert int(g[0, 0]) == 119
        assert int(b[0, 0]) == 138

    def test_clamped_high(self):
        packed = yuv_to_argb_scaled(_uniform_frame(2, 2, 255, 255, 255), scale_factor=1)
        r, _, b = unpack_rgb(packed.pixels)
        assert int(r[0, 0]) == 255
        assert int(b[0, 0]) == 255

    def test_clamped_low(self):
        packed = yuv_to_argb_scaled(_uniform_frame(2, 2, 0, 0, 0), scale_factor=1)
        r, _, b = unpack_rgb(packed.pixels)
        assert int(r[0, 0]) == 0
        assert int(b[0, 0]) == 0


# =========================================================================
# 다운스케일
# =========================================================================

class TestDownscale:
    @pytest.mark.parametrize(
        "width, height, factor, expected",
        [
            (1280, 720, 2, (640, 360)),
            (9, 7, 2, (4, 3)),
            (9, 7, 3, (3, 2)),
            (8, 6, 1, (8, 6)),
            (4, 4, 5, (0, 0)),
        ],
    )
    def test_output_dimensions(self, width, height, factor, expected):
        packed = yuv_to_argb_scaled(_uniform_frame(width, height, 50), scale_factor=factor)
        assert (packed.width, packed.height) == expected
        assert packed.pixels.shape == (expected[1], expected[0])

    def test_point_sampling(self):
        """출력 (dx, dy)는 원본 (dx*f, dy*f)의 Y 값을 사용한다."""
        width, height = 8, 4
        luma = np.arange(width * height, dtype=np.uint8)
        chroma = np.full(4 * 2, 128, dtype=np.uint8)
        frame = PlanarFrame(
            y=Plane(luma, row_stride=width),
            u=Plane(chroma, row_stride=4),
            v=Plane(chroma.copy(), row_stride=4),
            width=width,
            height=height,
        )
        packed = yuv_to_argb_scaled(frame, scale_factor=2)
        r, _, _ = unpack_rgb(packed.pixels)
        assert r.tolist() == [[0, 2, 4, 6], [16, 18, 20, 22]]

    def test_invalid_scale_factor(self):
        with pytest.raises(ValueError):
            yuv_to_argb_scaled(_uniform_frame(4, 4, 10), scale_factor=0)


# =========================================================================
# stride / 레이아웃
# =========================================================================

class TestStrides:
    def test_row_stride_padding_ignored(self):
        width, height, stride = 4, 2, 7
        luma = np.full(stride * height, 255, dtype=np.uint8)
        luma.reshape(height, stride)[:, :width] = 60
        chroma = np.full(2 * 1, 128, dtype=np.uint8)
        frame = PlanarFrame(
            y=Plane(luma, row_stride=stride),
            u=Plane(chroma, row_stride=2),
            v=Plane(chroma.copy(), row_stride=2),
            width=width,
            height=height,
        )
        r, _, _ = unpack_rgb(yuv_to_argb_scaled(frame, scale_factor=1).pixels)
        assert np.all(r == 60)

    def test_interleaved_chroma(self):
        """VU 인터리브 버퍼(NV21 형태)를 pixel_stride=2 평면 두 개로 읽는다."""
        width, height = 4, 4
        vu = np.empty(width * height // 2, dtype=np.uint8)
        vu[0::2] = 90    # V
        vu[1::2] = 150   # U
        frame = PlanarFrame(
            y=Plane(np.full(width * height, 100, dtype=np.uint8), row_stride=width),
            u=Plane(vu[1:], row_stride=width, pixel_stride=2),
            v=Plane(vu, row_stride=width, pixel_stride=2),
            width=width,
            height=height,
        )
        r, g, b = unpack_rgb(yuv_to_argb_scaled(frame, scale_factor=1).pixels)
        assert np.all(r == 48)
        assert np.all(g == 119)
        assert np.all(b == 138)

    def test_short_plane_rejected(self):
        with pytest.raises(FrameValidationError):
            PlanarFrame(
                y=Plane(np.zeros(10, dtype=np.uint8), row_stride=4),
                u=Plane(np.zeros(4, dtype=np.uint8), row_stride=2),
                v=Plane(np.zeros(4, dtype=np.uint8), row_stride=2),
                width=4,
                height=4,
            )

    def test_mismatched_chroma_strides_rejected(self):
        with pytest.raises(FrameValidationError):
            PlanarFrame(
                y=Plane(np.zeros(16, dtype=np.uint8), row_stride=4),
                u=Plane(np.zeros(8, dtype=np.uint8), row_stride=4),
                v=Plane(np.zeros(8, dtype=np.uint8), row_stride=2),
                width=4,
                height=4,
            )
