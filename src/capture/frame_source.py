"""
프레임 소스 모듈입니다.

역할:
- 합성 테스트 패턴(SyntheticFrameSource) 또는 비디오 파일(VideoFileFrameSource)에서
  YUV 4:2:0 PlanarFrame을 생성
- OpenCV BGR 이미지를 I420 평면 프레임으로 변환하는 헬퍼 제공
- system.mode 설정에 따라 소스를 선택하는 팩토리 제공

실제 카메라 캡처는 이 모듈의 범위 밖이며, 같은 read() 인터페이스를 구현하면
파이프라인에 그대로 연결할 수 있습니다.

사용 예시:
    >>> source = create_frame_source(config)
    >>> frame = source.read()
    >>> source.close()
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from src.capture import FrameSourceError, Plane, PlanarFrame
from src.config.schema import AppConfig

logger = logging.getLogger(__name__)


def planar_frame_from_bgr(bgr: np.ndarray, timestamp_ns: int = 0) -> PlanarFrame:
    """
    BGR 이미지를 I420(YUV 4:2:0 planar) PlanarFrame으로 변환합니다.

    파라미터:
        bgr: (H, W, 3) uint8 배열, H와 W는 짝수
        timestamp_ns: 캡처 시각

    에러:
        FrameSourceError: 크기가 홀수이거나 3채널 이미지가 아닐 때
    """
    if bgr.ndim != 3 or bgr.shape[2] != 3:
        raise FrameSourceError(f"3채널 BGR 이미지가 아닙니다: shape={bgr.shape}")

    height, width = bgr.shape[:2]
    if height % 2 or width % 2:
        raise FrameSourceError(f"I420 변환은 짝수 크기만 지원합니다: {width}x{height}")

    i420 = cv2.cvtColor(bgr, cv2.COLOR_BGR2YUV_I420).reshape(-1)
    luma_size = width * height
    chroma_size = luma_size // 4
    chroma_width = width // 2

    return PlanarFrame(
        y=Plane(i420[:luma_size], row_stride=width),
        u=Plane(i420[luma_size:luma_size + chroma_size], row_stride=chroma_width),
        v=Plane(i420[luma_size + chroma_size:], row_stride=chroma_width),
        width=width,
        height=height,
        timestamp_ns=timestamp_ns,
    )


class SyntheticFrameSource:
    """
    움직이는 컬러 그라데이션 + 체커보드 테스트 패턴을 생성하는 소스입니다.

    엣지/블러 필터 효과가 눈에 보이도록 경계가 뚜렷한 패턴을 사용합니다.
    """

    _CHECKER_SIZE = 32

    def __init__(self, config: AppConfig) -> None:
        self._width = config.capture.width
        self._height = config.capture.height
        self._frame_index = 0

        ys, xs = np.mgrid[0:self._height, 0:self._width]
        self._xs = xs.astype(np.int32)
        self._ys = ys.astype(np.int32)

        logger.info(f"SyntheticFrameSource 초기화 완료: {self._width}x{self._height}")

    def read(self) -> Optional[PlanarFrame]:
        """다음 테스트 패턴 프레임을 반환합니다 (끝나지 않음)."""
        shift = self._frame_index * 4
        checker = ((self._xs + shift) // self._CHECKER_SIZE + self._ys // self._CHECKER_SIZE) % 2

        bgr = np.empty((self._height, self._width, 3), dtype=np.uint8)
        bgr[:, :, 0] = ((self._xs + shift) * 255 // max(1, self._width - 1)) % 256
        bgr[:, :, 1] = (self._ys * 255 // max(1, self._height - 1)).astype(np.uint8)
        bgr[:, :, 2] = np.where(checker == 1, 220, 40).astype(np.uint8)

        self._frame_index += 1
        return planar_frame_from_bgr(bgr, timestamp_ns=time.perf_counter_ns())

    def close(self) -> None:
        logger.info(f"SyntheticFrameSource 종료: {self._frame_index}개 프레임 생성")


class VideoFileFrameSource:
    """
    OpenCV VideoCapture로 비디오 파일을 읽어 PlanarFrame을 생성하는 소스입니다.

    홀수 크기 프레임은 짝수로 잘라낸 뒤 변환합니다.
    """

    def __init__(self, config: AppConfig) -> None:
        self._path = Path(config.capture.video_path)
        self._loop_enabled = config.capture.loop

        if not self._path.is_file():
            raise FrameSourceError(f"비디오 파일을 찾을 수 없습니다: {self._path}")

        self._capture = cv2.VideoCapture(str(self._path))
        if not self._capture.isOpened():
            raise FrameSourceError(f"비디오 파일을 열 수 없습니다: {self._path}")

        self._frame_count = 0
        logger.info(f"VideoFileFrameSource 초기화 완료: {self._path}, loop={self._loop_enabled}")

    def read(self) -> Optional[PlanarFrame]:
        """
        다음 프레임을 반환합니다.

        반환값:
            파일 끝에 도달하면 None (loop 설정 시 처음부터 다시 읽음)
        """
        ok, bgr = self._capture.read()
        if not ok and self._loop_enabled and self._frame_count > 0:
            logger.info("비디오 파일 끝 도달, 처음부터 반복 재생")
            self._capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ok, bgr = self._capture.read()

        if not ok:
            logger.info(f"비디오 파일 끝 도달: {self._frame_count}개 프레임 읽음")
            return None

        self._frame_count += 1
        height, width = bgr.shape[:2]
        even = bgr[: height - height % 2, : width - width % 2]
        return planar_frame_from_bgr(np.ascontiguousarray(even), timestamp_ns=time.perf_counter_ns())

    def close(self) -> None:
        self._capture.release()
        logger.info(f"VideoFileFrameSource 종료: {self._path}")


def create_frame_source(config: AppConfig):
    """설정(system.mode)에 따라 적절한 프레임 소스를 생성합니다."""
    if config.system.mode == "file":
        return VideoFileFrameSource(config)
    return SyntheticFrameSource(config)
