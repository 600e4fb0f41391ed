"""
Realtime-Filter-Pipeline 설정 관리 모듈입니다.

역할:
- YAML 설정 파일을 로드하고 Pydantic 스키마로 유효성 검증
- 환경변수 오버라이드 지원 (접두사: RFP_)
- dot-notation 기반 설정값 조회 (예: "pipeline.filter")
- watchdog 기반 파일 변경 감지 및 핫스왑
- 설정 변경 시 구독자(콜백) 통보

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml")
    >>> scale = manager.get("pipeline.scale_factor")
    >>> manager.subscribe(lambda old, new: print("설정 변경됨"))
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from src.config.schema import AppConfig

# 모듈 로거 설정
logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사
ENV_PREFIX = "RFP_"

# 설정 변경 콜백 타입: (이전 설정, 새 설정) -> None
ConfigChangeCallback = Callable[[AppConfig, AppConfig], None]


class ConfigLoadError(Exception):
    """설정 파일 로드 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """설정 스키마 검증 실패 시 발생하는 에러입니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """설정 파일을 찾을 수 없을 때 발생하는 에러입니다."""
    pass


class _ConfigFileHandler(FileSystemEventHandler):
    """대상 설정 파일의 수정 이벤트만 ConfigManager로 전달하는 핸들러입니다."""

    def __init__(self, manager: "ConfigManager", target_filename: str) -> None:
        super().__init__()
        self._manager = manager
        self._target_filename = target_filename

    def on_modified(self, event: FileSystemEvent) -> None:
        # 디렉토리 이벤트는 무시
        if event.is_directory:
            return
        if Path(str(event.src_path)).name == self._target_filename:
            logger.info(f"설정 파일 변경 감지: {event.src_path}")
            self._manager.reload()


class ConfigManager:
    """
    YAML 설정 파일을 로드하고 관리하는 매니저 클래스입니다.

    역할:
    - YAML 파일 파싱 및 Pydantic 유효성 검증
    - 환경변수 오버라이드 (RFP_ 접두사)
    - dot-notation 설정값 조회
    - 파일 변경 감지(watchdog) 및 구독자 통보
    - 검증 실패 시 이전 설정 유지 (안전한 롤백)
    """

    def __init__(self) -> None:
        # 현재 활성 설정 객체 (로드 전에는 None)
        self._config: Optional[AppConfig] = None
        # 설정 파일 경로 (로드 시 설정됨)
        self._config_filepath: Optional[Path] = None
        # 설정 변경 시 호출할 콜백 목록
        self._subscribers: list[ConfigChangeCallback] = []
        self._lock: threading.RLock = threading.RLock()
        # watchdog Observer 인스턴스 (watch() 호출 시 생성)
        self._observer: Optional[Any] = None

        logger.debug("ConfigManager 인스턴스 생성 완료")

    @property
    def config(self) -> Optional[AppConfig]:
        """현재 활성 설정 객체를 반환합니다."""
        with self._lock:
            return self._config

    def load(self, filepath: str | Path) -> AppConfig:
        """
        YAML 설정 파일을 로드하고 Pydantic 스키마로 검증합니다.

        처리 순서:
        1. 파일 존재 여부 확인
        2. YAML 파싱
        3. 환경변수 오버라이드 적용
        4. Pydantic 스키마 검증
        5. 검증 통과 시 활성 설정으로 교체

        파라미터:
            filepath (str | Path): YAML 설정 파일 경로

        반환값:
            AppConfig: 검증 완료된 설정 객체

        에러:
            ConfigFileNotFoundError: 파일이 존재하지 않을 때
            ConfigValidationError: 스키마 검증 실패 시
            ConfigLoadError: YAML 파싱 실패 등 기타 에러
        """
        filepath = Path(filepath)
        logger.info(f"설정 파일 로드 시작: {filepath}")

        if not filepath.exists():
            error_message = f"설정 파일을 찾을 수 없습니다: {filepath}"
            logger.error(error_message)
            raise ConfigFileNotFoundError(error_message)

        raw_config = self._parse_yaml_file(filepath)
        raw_config = self._apply_env_overrides(raw_config)
        validated_config = self._validate_config(raw_config)

        with self._lock:
            self._config = validated_config
            self._config_filepath = filepath

        logger.info(
            f"설정 로드 성공: "
            f"mode={validated_config.system.mode}, "
            f"filter={validated_config.pipeline.filter}, "
            f"execution_mode={validated_config.pipeline.execution_mode}, "
            f"scale_factor={validated_config.pipeline.scale_factor}"
        )
        return validated_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        dot-notation으로 설정값을 조회합니다.

        예: "pipeline.filter" -> config.pipeline.filter

        파라미터:
            key (str): dot-notation 설정 키
            default (Any): 키가 존재하지 않을 때 반환할 기본값

        에러:
            RuntimeError: 설정이 로드되지 않은 상태에서 호출 시
        """
        with self._lock:
            if self._config is None:
                error_message = "설정이 아직 로드되지 않았습니다. load()를 먼저 호출하세요."
                logger.error(error_message)
                raise RuntimeError(error_message)

            current_value: Any = self._config
            for part in key.split("."):
                if isinstance(current_value, dict):
                    if part not in current_value:
                        return default
                    current_value = current_value[part]
                elif hasattr(current_value, part):
                    current_value = getattr(current_value, part)
                else:
                    logger.debug(f"설정 키 '{key}'에서 '{part}' 부분을 찾을 수 없음, 기본값 반환")
                    return default

            return current_value

    def subscribe(self, callback: ConfigChangeCallback) -> None:
        """
        설정 변경 시 호출될 콜백 함수를 등록합니다.

        파라미터:
            callback (ConfigChangeCallback): (이전_설정, 새_설정) -> None 형태의 콜백
        """
        self._subscribers.append(callback)
        logger.info(f"설정 변경 구독자 등록 완료 (총 {len(self._subscribers)}명)")

    def unsubscribe(self, callback: ConfigChangeCallback) -> None:
        """등록된 설정 변경 콜백을 제거합니다."""
        try:
            self._subscribers.remove(callback)
            logger.info(f"설정 변경 구독자 제거 완료 (남은 구독자: {len(self._subscribers)}명)")
        except ValueError:
            logger.warning("제거할 구독자를 찾을 수 없습니다")

    def watch(self, filepath: str | Path | None = None) -> None:
        """
        watchdog으로 설정 파일 변경을 감시합니다.

        파일이 수정되면 reload()로 다시 읽고, 검증 통과 시
        등록된 구독자들에게 변경 사항을 통보합니다.

        파라미터:
            filepath: 감시할 파일 경로. None이면 마지막으로 로드한 파일 경로
        """
        watch_path = Path(filepath) if filepath else self._config_filepath

        if watch_path is None:
            logger.warning("감시할 파일 경로가 지정되지 않았습니다. load()를 먼저 호출하세요.")
            return

        if self._observer is not None:
            logger.debug("설정 파일 감시가 이미 실행 중입니다")
            return

        observer = Observer()
        observer.schedule(
            _ConfigFileHandler(self, watch_path.name),
            path=str(watch_path.resolve().parent),
            recursive=False,
        )
        observer.daemon = True
        observer.start()
        self._observer = observer

        logger.info(f"설정 파일 감시 활성화 완료: {watch_path}")

    def stop_watch(self) -> None:
        """설정 파일 감시를 중지합니다."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("설정 파일 감시 중지 완료")

    def validate_schema(self, raw_config: dict) -> bool:
        """
        딕셔너리 데이터가 AppConfig 스키마를 만족하는지 검증합니다.

        반환값:
            bool: 검증 통과 시 True, 실패 시 False
        """
        try:
            AppConfig(**raw_config)
            return True
        except ValidationError as validation_error:
            logger.warning(f"스키마 검증 실패: {validation_error}")
            return False

    def reload(self) -> bool:
        """
        마지막으로 로드한 설정 파일을 다시 읽어 핫스왑합니다.

        검증에 실패하면 이전 설정을 유지합니다 (롤백).

        반환값:
            bool: 새 설정이 적용되었으면 True
        """
        if self._config_filepath is None:
            logger.warning("설정 파일 경로가 설정되지 않아 리로드를 건너뜁니다")
            return False

        logger.info(f"설정 리로드 시작: {self._config_filepath}")

        try:
            raw_config = self._parse_yaml_file(self._config_filepath)
            raw_config = self._apply_env_overrides(raw_config)
            new_config = self._validate_config(raw_config)
        except ConfigLoadError as load_error:
            logger.error(f"설정 핫스왑 실패, 이전 설정을 유지합니다: {load_error}")
            return False

        with self._lock:
            previous_config = self._config
            self._config = new_config

        logger.info("설정 핫스왑 성공: 새 설정이 적용되었습니다")

        if previous_config is not None:
            self._notify_subscribers(previous_config, new_config)
        return True

    # =========================================================================
    # 내부 메서드 (private)
    # =========================================================================

    def _parse_yaml_file(self, filepath: Path) -> dict:
        """YAML 파일을 읽어서 딕셔너리로 파싱합니다."""
        try:
            with open(filepath, "r", encoding="utf-8") as config_file:
                raw_data = yaml.safe_load(config_file)
        except yaml.YAMLError as yaml_error:
            error_message = f"YAML 파싱 에러: {yaml_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from yaml_error
        except OSError as file_error:
            error_message = f"파일 읽기 에러: {file_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from file_error

        if raw_data is None:
            logger.warning(f"설정 파일이 비어있습니다: {filepath}")
            return {}

        if not isinstance(raw_data, dict):
            error_message = f"설정 파일의 최상위 구조가 딕셔너리가 아닙니다: {type(raw_data)}"
            logger.error(error_message)
            raise ConfigLoadError(error_message)

        return raw_data

    def _apply_env_overrides(self, raw_config: dict) -> dict:
        """
        RFP_ 접두사 환경변수로 설정값을 오버라이드합니다.

        매핑 규칙: 첫 번째 언더스코어가 섹션 구분자
        - RFP_PIPELINE_FILTER -> pipeline.filter
        - RFP_METRICS_WINDOW_SIZE -> metrics.window_size
        - RFP_SYSTEM_LOG_LEVEL -> system.log_level
        """
        override_count = 0

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            path_parts = env_key[len(ENV_PREFIX):].lower().split("_", 1)
            if len(path_parts) < 2:
                logger.debug(f"환경변수 '{env_key}' 무시 (키 경로 부족)")
                continue

            section_name, field_name = path_parts
            section = raw_config.setdefault(section_name, {})
            if not isinstance(section, dict):
                logger.debug(f"환경변수 '{env_key}' 무시 (섹션이 딕셔너리가 아님)")
                continue

            converted_value = self._convert_env_value(env_value)
            section[field_name] = converted_value
            override_count += 1
            logger.info(
                f"환경변수 오버라이드: {env_key} -> "
                f"{section_name}.{field_name} = {converted_value}"
            )

        if override_count > 0:
            logger.info(f"환경변수 오버라이드 적용 완료: {override_count}건")

        return raw_config

    def _convert_env_value(self, value: str) -> Any:
        """
        환경변수 문자열 값을 bool / int / float / str 순서로 변환합니다.
        """
        if value.lower() == "true":
            return True
        if value.lower() == "false":
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _validate_config(self, raw_config: dict) -> AppConfig:
        """
        딕셔너리를 Pydantic AppConfig 모델로 검증하고 변환합니다.

        에러:
            ConfigValidationError: Pydantic 검증 실패 시
        """
        try:
            return AppConfig(**raw_config)

        except ValidationError as validation_error:
            error_details = validation_error.errors()
            for error_detail in error_details:
                field_path = " -> ".join(str(loc) for loc in error_detail["loc"])
                logger.error(
                    f"설정 검증 실패 - 필드: {field_path}, "
                    f"에러: {error_detail['msg']}, "
                    f"입력값: {error_detail.get('input', 'N/A')}"
                )

            error_message = f"설정 스키마 검증 실패: {len(error_details)}개 에러 발생"
            raise ConfigValidationError(error_message) from validation_error

    def _notify_subscribers(
        self,
        previous_config: AppConfig,
        new_config: AppConfig,
    ) -> None:
        """
        등록된 모든 구독자에게 설정 변경을 통보합니다.

        개별 구독자의 콜백 실행 중 에러가 발생해도
        다른 구독자의 통보는 계속 진행합니다.
        """
        subscriber_count = len(self._subscribers)

        for subscriber_index, callback in enumerate(self._subscribers):
            try:
                callback(previous_config, new_config)
            except Exception as callback_error:
                logger.error(
                    f"구독자 {subscriber_index + 1}/{subscriber_count} 콜백 실행 중 에러: "
                    f"{callback_error}",
                    exc_info=True,
                )

        logger.info(f"설정 변경 통보 완료: {subscriber_count}명의 구독자")
