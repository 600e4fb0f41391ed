"""
프레임 컴포지터 모듈 패키지

- FrameCompositor: ARGB 패킹 프레임 → OpenCV BGR 이미지 (회전 포함) 및 프리뷰 출력
"""

from src.compositor.frame_compositor import FrameCompositor

__all__ = ["FrameCompositor"]
