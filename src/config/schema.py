"""
Realtime-Filter-Pipeline 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, capture, pipeline, compositor, metrics, dashboard)을
  독립적인 중첩 모델로 분리하여 유지보수성 확보
- 필드별 기본값, 허용 범위, 유효성 검증(validator)을 포함

사용 예시:
    >>> from src.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.pipeline.filter)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

# 모듈 로거 설정
logger = logging.getLogger(__name__)

# 필터/실행 모드 이름 (src.filters 의 Enum 멤버 이름과 동일)
FILTER_NAMES = ("NONE", "GRAYSCALE", "SOBEL_EDGE", "GAUSSIAN_BLUR", "SHARPEN", "EMBOSS")
EXECUTION_MODE_NAMES = ("BASELINE", "SIMD", "GPU", "HYBRID")


# =============================================================================
# system 섹션: 시스템 전역 설정
# =============================================================================

class SystemConfig(BaseModel):
    """
    시스템 전역 설정을 정의하는 모델입니다.

    역할:
    - 프레임 소스 모드(synthetic/file) 결정
    - 로깅 레벨 및 포맷 지정
    - 세션 식별자 관리
    """
    # 프레임 소스 모드: "synthetic"은 테스트 패턴 생성, "file"은 비디오 파일 재생
    mode: str = Field(default="synthetic", description="프레임 소스 모드 (synthetic | file)")
    # 로그 출력 레벨
    log_level: str = Field(default="INFO", description="로그 레벨 (DEBUG | INFO | WARNING | ERROR)")
    # 로그 출력 포맷
    log_format: str = Field(default="json", description="로그 포맷 (json | text)")
    # 로그 파일 저장 디렉토리 경로
    log_dir: str = Field(default="output/logs", description="로그 저장 디렉토리")
    # 세션 고유 식별자 (빈 문자열이면 UUID로 자동 생성)
    session_id: str = Field(default="", description="세션 ID (비어있으면 UUID 자동생성)")

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, value: str) -> str:
        """프레임 소스 모드가 허용된 값인지 검증합니다."""
        allowed_modes = ("synthetic", "file")
        if value not in allowed_modes:
            error_message = f"mode는 {allowed_modes} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """로그 레벨이 유효한 Python 로깅 레벨인지 검증합니다."""
        allowed_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        # 대소문자 구분 없이 비교 후 대문자로 정규화
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            error_message = f"log_level은 {allowed_levels} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """로그 포맷이 지원되는 형식인지 검증합니다."""
        allowed_formats = ("json", "text")
        if value not in allowed_formats:
            error_message = f"log_format은 {allowed_formats} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# capture 섹션: 프레임 소스 설정
# =============================================================================

class CaptureConfig(BaseModel):
    """
    프레임 소스(합성 패턴 / 비디오 파일) 설정을 정의하는 모델입니다.

    역할:
    - 합성 프레임 해상도 및 프레임레이트 지정
    - 비디오 파일 경로 및 반복 재생 제어
    """
    # 합성 프레임 가로 픽셀 수 (YUV 4:2:0 이므로 짝수)
    width: int = Field(default=1280, description="프레임 가로 크기")
    # 합성 프레임 세로 픽셀 수
    height: int = Field(default=720, description="프레임 세로 크기")
    # 목표 프레임레이트 (0이면 제한 없음)
    fps: float = Field(default=30.0, description="목표 프레임레이트 (0=무제한)")
    # 비디오 파일 경로 (mode=file)
    video_path: str = Field(default="", description="입력 비디오 파일 경로")
    # 파일 반복 재생 여부
    loop: bool = Field(default=False, description="파일 반복 재생 여부")

    @field_validator("width", "height")
    @classmethod
    def validate_even_dimension(cls, value: int) -> int:
        """4:2:0 크로마 서브샘플링을 위해 양의 짝수인지 검증합니다."""
        if value <= 0 or value % 2 != 0:
            error_message = f"프레임 크기는 양의 짝수여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("fps")
    @classmethod
    def validate_fps(cls, value: float) -> float:
        """프레임레이트가 음수가 아닌지 검증합니다."""
        if value < 0:
            error_message = f"fps는 0 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# pipeline 섹션: 변환/필터 설정
# =============================================================================

class PipelineConfig(BaseModel):
    """
    YUV 변환 및 필터 처리 설정입니다.

    역할:
    - 변환 단계의 정수 다운스케일 배율 지정
    - 초기 필터 및 실행 모드 선택
    """
    # 정수 다운스케일 배율 (1 = 원본 크기)
    scale_factor: int = Field(default=2, description="다운스케일 배율 (>= 1)")
    # 초기 필터
    filter: str = Field(default="NONE", description=f"필터 ({' | '.join(FILTER_NAMES)})")
    # 초기 실행 모드
    execution_mode: str = Field(
        default="BASELINE",
        description=f"실행 모드 ({' | '.join(EXECUTION_MODE_NAMES)})",
    )

    @field_validator("scale_factor")
    @classmethod
    def validate_scale_factor(cls, value: int) -> int:
        """다운스케일 배율이 1 이상인지 검증합니다."""
        if value < 1:
            error_message = f"scale_factor는 1 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("filter")
    @classmethod
    def validate_filter(cls, value: str) -> str:
        """필터 이름이 지원되는 값인지 검증하고 대문자로 정규화합니다."""
        upper_value = value.upper()
        if upper_value not in FILTER_NAMES:
            error_message = f"filter는 {FILTER_NAMES} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("execution_mode")
    @classmethod
    def validate_execution_mode(cls, value: str) -> str:
        """실행 모드 이름이 지원되는 값인지 검증하고 대문자로 정규화합니다."""
        upper_value = value.upper()
        if upper_value not in EXECUTION_MODE_NAMES:
            error_message = (
                f"execution_mode는 {EXECUTION_MODE_NAMES} 중 하나여야 합니다. "
                f"입력값: '{value}'"
            )
            raise ValueError(error_message)
        return upper_value


# =============================================================================
# compositor 섹션: 출력 합성 설정
# =============================================================================

class CompositorConfig(BaseModel):
    """
    처리된 프레임의 화면 출력 설정입니다.

    역할:
    - 출력 회전 각도 지정
    - OpenCV 프리뷰 창 표시 여부
    """
    # 출력 회전 각도 (시계 방향)
    rotation_degrees: int = Field(default=0, description="회전 각도 (0 | 90 | 180 | 270)")
    # OpenCV 프리뷰 창 표시 여부
    show_preview: bool = Field(default=True, description="프리뷰 창 표시 여부")

    @field_validator("rotation_degrees")
    @classmethod
    def validate_rotation(cls, value: int) -> int:
        """회전 각도가 90도 단위인지 검증합니다."""
        allowed = (0, 90, 180, 270)
        if value not in allowed:
            error_message = f"rotation_degrees는 {allowed} 중 하나여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# metrics 섹션: 성능 메트릭 설정
# =============================================================================

class MetricsConfig(BaseModel):
    """
    성능 메트릭 수집 설정입니다.

    역할:
    - 롤링 윈도우 크기(프레임 수) 설정
    - 주기적 리포트 간격 및 CSV 출력 경로 지정
    """
    # 롤링 통계 윈도우 크기 (프레임 수)
    window_size: int = Field(default=30, description="롤링 윈도우 크기 (프레임)")
    # 콘솔 리포트 출력 주기 (초)
    report_interval_sec: float = Field(default=5.0, description="리포트 출력 주기 (초)")
    # 메트릭 CSV 저장 디렉토리
    metrics_output_dir: str = Field(default="output/reports", description="메트릭 출력 디렉토리")

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, value: int) -> int:
        """윈도우 크기가 1 이상인지 검증합니다."""
        if value < 1:
            error_message = f"window_size는 1 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# dashboard 섹션: 대시보드 표시 설정
# =============================================================================

class DashboardConfig(BaseModel):
    """
    대시보드 유형 및 갱신 주기 설정입니다.
    """
    # 대시보드 유형 (tui=터미널, none=비활성)
    type: str = Field(default="tui", description="대시보드 유형 (tui | none)")
    # 대시보드 갱신 주기 (밀리초)
    refresh_interval_ms: int = Field(default=500, description="갱신 주기 (ms)")

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        """대시보드 유형이 지원되는 값인지 검증합니다."""
        allowed_types = ("tui", "none")
        if value not in allowed_types:
            error_message = f"dashboard type은 {allowed_types} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - Pydantic v2 유효성 검증을 통해 설정 무결성 보장
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> import yaml
        >>> with open("config.yaml") as f:
        ...     raw = yaml.safe_load(f)
        >>> config = AppConfig(**raw)
        >>> print(config.pipeline.scale_factor)
        2
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 프레임 소스 설정
    capture: CaptureConfig = Field(default_factory=CaptureConfig, description="캡처 설정")
    # 변환/필터 설정
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig, description="파이프라인 설정")
    # 화면 출력 설정
    compositor: CompositorConfig = Field(default_factory=CompositorConfig, description="컴포지터 설정")
    # 메트릭 설정
    metrics: MetricsConfig = Field(default_factory=MetricsConfig, description="메트릭 설정")
    # 대시보드 설정
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig, description="대시보드 설정")
