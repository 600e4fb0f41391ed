"""
프레임 파이프라인 모듈 패키지

- FramePipeline: 변환 → 필터 → 합성 3단계를 한 번에 한 프레임씩 실행하고 측정
- PipelineResult: 한 프레임 처리 결과 (ARGB 프레임, 합성 이미지, 지연시간 샘플)
"""

from src.pipeline.frame_pipeline import FramePipeline, PipelineResult

__all__ = ["FramePipeline", "PipelineResult"]
