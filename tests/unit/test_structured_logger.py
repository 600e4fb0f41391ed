"""
구조화 로깅 모듈 단위 테스트

검증 조건:
- JSON 포맷 로그에 session_id, level, module 필드 포함
- <log_dir>/pipeline.log RotatingFileHandler (10MB x 5)
- console=False 시 파일 핸들러만 등록 (TUI 실행 중)
- 재설정 시 핸들러 중복 없음
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from io import StringIO

import pytest

from src.config.schema import AppConfig
from src.logging import StructuredLogger, setup_logging
from src.logging.structured_logger import (
    LOG_BACKUP_COUNT,
    LOG_FILENAME,
    LOG_MAX_BYTES,
    _JsonFormatter,
    _TextFormatter,
)


# =========================================================================
# 픽스처
# =========================================================================

@pytest.fixture(autouse=True)
def reset_root_logger():
    """각 테스트 후 root logger 핸들러 초기화."""
    yield
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()


def _config(tmp_path, log_format: str = "json", session_id: str = "pipeline-session-01") -> AppConfig:
    return AppConfig(
        system={
            "log_level": "DEBUG",
            "log_format": log_format,
            "log_dir": str(tmp_path / "logs"),
            "session_id": session_id,
        }
    )


def _emit(formatter: logging.Formatter, message: str, level: int = logging.INFO, **extra) -> str:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    logger = logging.getLogger("test.emit")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        logger.log(level, message, extra=extra or None)
    finally:
        logger.removeHandler(handler)
    return stream.getvalue().strip()


# =========================================================================
# setup_logging
# =========================================================================

class TestSetupLogging:
    def test_log_file_created(self, tmp_path):
        setup_logging(_config(tmp_path))
        log_file = tmp_path / "logs" / LOG_FILENAME
        assert log_file.exists()
        assert log_file.read_text(encoding="utf-8")

    def test_rotating_handler_policy(self, tmp_path):
        setup_logging(_config(tmp_path))
        rotating = [
            h for h in logging.getLogger().handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == LOG_MAX_BYTES == 10 * 1024 * 1024
        assert rotating[0].backupCount == LOG_BACKUP_COUNT == 5

    def test_console_disabled(self, tmp_path):
        setup_logging(_config(tmp_path), console=False)
        handlers = logging.getLogger().handlers
        assert all(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)

    def test_repeat_setup_does_not_duplicate(self, tmp_path):
        config = _config(tmp_path)
        setup_logging(config)
        count = len(logging.getLogger().handlers)
        setup_logging(config)
        assert len(logging.getLogger().handlers) == count

    def test_level_applied(self, tmp_path):
        config = AppConfig(system={"log_level": "warning", "log_dir": str(tmp_path)})
        setup_logging(config)
        assert logging.getLogger().level == logging.WARNING

    def test_session_id_sources(self, tmp_path):
        setup_logging(_config(tmp_path), session_id="override")
        assert StructuredLogger.get_session_id() == "override"

        setup_logging(_config(tmp_path))
        assert StructuredLogger.get_session_id() == "pipeline-session-01"

        setup_logging(_config(tmp_path, session_id=""))
        sid = StructuredLogger.get_session_id()
        assert len(sid) == 36
        assert sid.count("-") == 4


# =========================================================================
# 포맷터
# =========================================================================

class TestJsonFormatter:
    def test_common_fields(self):
        data = json.loads(_emit(_JsonFormatter(session_id="abc"), "프레임 처리 완료"))
        assert data["session_id"] == "abc"
        assert data["level"] == "INFO"
        assert data["module"] == "test.emit"
        assert data["message"] == "프레임 처리 완료"

    def test_extra_fields(self):
        data = json.loads(_emit(_JsonFormatter(), "성능 리포트", frame_count=120, fps=29.7))
        assert data["frame_count"] == 120
        assert data["fps"] == pytest.approx(29.7)


class TestTextFormatter:
    def test_session_prefix_and_level(self):
        output = _emit(_TextFormatter(session_id="0123456789"), "필터 변경", logging.WARNING)
        assert "[01234567]" in output
        assert "WARNING" in output
        assert "필터 변경" in output

    def test_without_session(self):
        assert "[no-sid]" in _emit(_TextFormatter(), "시작")


class TestStructuredLogger:
    def test_get_returns_named_logger(self):
        logger = StructuredLogger.get("src.pipeline.frame_pipeline")
        assert isinstance(logger, logging.Logger)
        assert logger is logging.getLogger("src.pipeline.frame_pipeline")
