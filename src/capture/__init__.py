"""
캡처 모듈 패키지

공통 데이터 타입 정의:
- Plane: 단일 샘플 평면 (Y / U / V)
- PlanarFrame: 검증된 YUV 4:2:0 평면 프레임
- PackedFrame: 픽셀당 32비트 ARGB 패킹 프레임

프레임 크기/stride 불변식은 생성 시점에 한 번만 검증합니다.
변환/필터 루프는 검증된 프레임만 받으므로 내부에서 경계를 다시 검사하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class FrameValidationError(ValueError):
    """프레임 버퍼가 선언된 크기/stride와 맞지 않을 때 발생하는 에러입니다."""
    pass


class FrameSourceError(Exception):
    """프레임 소스(파일/장치)를 열거나 읽을 수 없을 때 발생하는 에러입니다."""
    pass


@dataclass
class Plane:
    """
    단일 샘플 평면입니다.

    필드:
        data: 샘플 바이트 (1차원 uint8, 읽기 전용 뷰로 보관)
        row_stride: 한 행의 바이트 간격
        pixel_stride: 인접 샘플 사이의 바이트 간격 (인터리브 크로마는 2)
    """
    data: np.ndarray
    row_stride: int
    pixel_stride: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.data, (bytes, bytearray, memoryview)):
            self.data = np.frombuffer(self.data, dtype=np.uint8)
        else:
            self.data = np.asarray(self.data, dtype=np.uint8).reshape(-1)
        if self.row_stride < 1 or self.pixel_stride < 1:
            raise FrameValidationError(
                f"stride는 1 이상이어야 합니다: "
                f"row_stride={self.row_stride}, pixel_stride={self.pixel_stride}"
            )

    def required_length(self, columns: int, rows: int) -> int:
        """columns x rows 샘플을 읽는 데 필요한 최소 바이트 수를 반환합니다."""
        if columns <= 0 or rows <= 0:
            return 0
        return (rows - 1) * self.row_stride + (columns - 1) * self.pixel_stride + 1


@dataclass
class PlanarFrame:
    """
    검증된 YUV 4:2:0 평면 프레임입니다.

    크로마 평면은 가로/세로 2:1로 서브샘플링되며, U/V 평면은
    동일한 row_stride/pixel_stride를 공유해야 합니다.

    필드:
        y, u, v: 휘도/크로마 평면
        width, height: 원본 프레임 크기 (픽셀)
        timestamp_ns: 캡처 시각 (time.perf_counter_ns 기준, 선택)
    """
    y: Plane
    u: Plane
    v: Plane
    width: int
    height: int
    timestamp_ns: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise FrameValidationError(
                f"프레임 크기는 양수여야 합니다: {self.width}x{self.height}"
            )
        if self.y.pixel_stride != 1:
            raise FrameValidationError(
                f"Y 평면 pixel_stride는 1이어야 합니다: {self.y.pixel_stride}"
            )
        if (self.u.row_stride, self.u.pixel_stride) != (self.v.row_stride, self.v.pixel_stride):
            raise FrameValidationError(
                "U/V 평면의 stride가 서로 다릅니다: "
                f"U=({self.u.row_stride}, {self.u.pixel_stride}), "
                f"V=({self.v.row_stride}, {self.v.pixel_stride})"
            )

        chroma_width = (self.width + 1) // 2
        chroma_height = (self.height + 1) // 2
        checks = (
            ("Y", self.y, self.width, self.height),
            ("U", self.u, chroma_width, chroma_height),
            ("V", self.v, chroma_width, chroma_height),
        )
        for name, plane, columns, rows in checks:
            required = plane.required_length(columns, rows)
            if plane.data.size < required:
                raise FrameValidationError(
                    f"{name} 평면 길이 부족: {plane.data.size} < {required} "
                    f"({self.width}x{self.height}, row_stride={plane.row_stride})"
                )


@dataclass
class PackedFrame:
    """
    픽셀당 32비트 ARGB 패킹 프레임입니다.

    각 값은 A<<24 | R<<16 | G<<8 | B 로 인코딩됩니다.

    필드:
        pixels: (height, width) uint32 배열 (row-major)
        width: 프레임 가로 픽셀 수
        height: 프레임 세로 픽셀 수
    """
    pixels: np.ndarray
    width: int
    height: int

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels, dtype=np.uint32)
        if pixels.size != self.width * self.height:
            raise FrameValidationError(
                f"버퍼 길이 불일치: {pixels.size} != {self.width}x{self.height}"
            )
        self.pixels = pixels.reshape(self.height, self.width)

    def copy(self) -> "PackedFrame":
        """픽셀 버퍼를 복사한 새 프레임을 반환합니다."""
        return PackedFrame(pixels=self.pixels.copy(), width=self.width, height=self.height)
