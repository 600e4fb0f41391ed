"""
프레임 컴포지터 모듈입니다.

역할:
- ARGB 패킹 프레임(uint32)을 OpenCV BGR numpy 배열로 변환
- 설정된 각도(0/90/180/270)로 회전
- OpenCV imshow로 프리뷰 출력

파이프라인 3단계(합성/표시 준비)에 해당하며, 처리 시간이 display_ms로 측정됩니다.

사용 예시:
    >>> compositor = FrameCompositor(config)
    >>> image = compositor.compose(filtered_frame)
    >>> compositor.display(image)
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from src.capture import PackedFrame
from src.config.schema import AppConfig

logger = logging.getLogger(__name__)

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


class FrameCompositor:
    """
    처리된 ARGB 프레임을 화면 출력용 BGR 이미지로 만드는 클래스입니다.
    """

    # 미리보기 창 이름
    _WINDOW_NAME = "Realtime-Filter-Pipeline Preview"

    def __init__(self, config: AppConfig) -> None:
        self._rotation_degrees = config.compositor.rotation_degrees
        self._window_open = False
        logger.info(f"FrameCompositor 초기화 완료: rotation={self._rotation_degrees}")

    @property
    def rotation_degrees(self) -> int:
        return self._rotation_degrees

    # =========================================================================
    # 공개 인터페이스
    # =========================================================================

    def compose(self, frame: PackedFrame) -> np.ndarray:
        """
        ARGB 프레임을 BGR 배열로 변환하고 회전을 적용합니다.

        반환값:
            np.ndarray: (H, W, 3) uint8 BGR 배열 (90/270도 회전 시 (W, H, 3))
        """
        bgr = to_bgr(frame)
        rotate_code = _ROTATE_CODES.get(self._rotation_degrees)
        if rotate_code is None or bgr.size == 0:
            return bgr
        return cv2.rotate(bgr, rotate_code)

    def display(self, image: np.ndarray) -> bool:
        """
        BGR 배열을 OpenCV 미리보기 창으로 출력합니다.

        반환값:
            bool: 계속 표시하면 True, 'q' 키 입력 또는 출력 실패 시 False
        """
        try:
            cv2.imshow(self._WINDOW_NAME, image)
            self._window_open = True
            key = cv2.waitKey(1) & 0xFF
            return key != ord("q")
        except cv2.error as exc:
            logger.error(f"OpenCV 화면 출력 실패: {exc}")
            return False

    def update_config(self, config: AppConfig) -> None:
        """회전 설정을 핫스왑으로 업데이트합니다."""
        self._rotation_degrees = config.compositor.rotation_degrees
        logger.info(f"FrameCompositor 설정 핫스왑: rotation={self._rotation_degrees}")

    def close(self) -> None:
        """OpenCV 창을 닫습니다."""
        if not self._window_open:
            return
        try:
            cv2.destroyWindow(self._WINDOW_NAME)
        except cv2.error as exc:
            logger.debug(f"OpenCV 창 닫기 실패: {exc}")
        self._window_open = False


def to_bgr(frame: PackedFrame) -> np.ndarray:
    """
    ARGB uint32 프레임을 (H, W, 3) BGR uint8 배열로 변환합니다.

    리틀엔디언 바이트 순서에서 ARGB 워드는 [B, G, R, A]이므로
    앞 3바이트가 곧 BGR입니다.
    """
    little_endian = np.ascontiguousarray(frame.pixels, dtype="<u4")
    channels = little_endian.view(np.uint8).reshape(frame.height, frame.width, 4)
    return np.ascontiguousarray(channels[:, :, :3])
