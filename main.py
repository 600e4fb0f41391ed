"""
Realtime-Filter-Pipeline 실행 진입점

역할:
- 설정 로드 + 커맨드라인 오버라이드 + 로깅 초기화
- 파이프라인: FrameSource → FramePipeline(변환 → 필터 → 합성) → 프리뷰 창
- TUI 대시보드 실행 시 프레임 루프는 작업 스레드에서 실행
- SIGINT/SIGTERM 또는 프리뷰 창 'q' 입력 시 정상 종료
- 종료 시 롤링 윈도우 성능 CSV 저장 (--export-csv)

실행 예시:
    합성 테스트 패턴 + TUI 대시보드:
        python main.py

    비디오 파일, 샤프닝 필터, 대시보드 없이 300프레임:
        python main.py --mode file --video sample.mp4 --filter SHARPEN --no-dashboard --frames 300

    화면 출력 없이 10초 측정 후 CSV 저장:
        python main.py --no-display --no-dashboard --duration 10 --export-csv output/reports/perf.csv
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading
import time
from pathlib import Path
from typing import Optional

from src.capture import FrameSourceError
from src.capture.frame_source import create_frame_source
from src.config.config_manager import ConfigFileNotFoundError, ConfigManager
from src.config.schema import AppConfig
from src.logging import setup_logging
from src.pipeline import FramePipeline

logger = logging.getLogger(__name__)


class FrameLoop:
    """
    프레임 소스에서 프레임을 읽어 파이프라인에 넣는 실행 루프입니다.

    종료 조건:
        - request_shutdown() 호출 (시그널 핸들러, 대시보드 종료)
        - 프리뷰 창에서 'q' 입력
        - 소스 끝 도달, --frames 또는 --duration 제한 도달

    프레임 하나의 처리 예외는 루프를 멈추지 않고 해당 프레임만 건너뜁니다.
    """

    def __init__(
        self,
        config: AppConfig,
        pipeline: FramePipeline,
        source,
        no_display: bool = False,
        max_frames: int = 0,
        duration_sec: float = 0.0,
    ) -> None:
        self._config = config
        self._pipeline = pipeline
        self._source = source
        self._show_preview = config.compositor.show_preview and not no_display
        self._max_frames = max_frames
        self._duration_sec = duration_sec
        self._shutdown_event = threading.Event()
        self._processed = 0
        self._failed = 0

    @property
    def processed(self) -> int:
        return self._processed

    @property
    def failed(self) -> int:
        """처리 중 예외로 건너뛴 프레임 수"""
        return self._failed

    def request_shutdown(self) -> None:
        """외부(시그널 핸들러 등)에서 종료를 요청합니다."""
        self._shutdown_event.set()

    def run(self, report: bool = True) -> None:
        """
        종료 조건을 만날 때까지 프레임을 처리합니다.

        파라미터:
            report: True이면 metrics.report_interval_sec 주기로 성능 리포트 로그 출력
        """
        fps = self._config.capture.fps
        frame_interval = 1.0 / fps if fps > 0 else 0.0
        started = time.monotonic()
        last_report = started
        logger.info(f"프레임 루프 시작: target_fps={fps}, preview={self._show_preview}")

        try:
            while not self._shutdown_event.is_set():
                tick = time.monotonic()
                if self._duration_sec > 0 and tick - started >= self._duration_sec:
                    logger.info(f"{self._duration_sec}초 경과, 프레임 루프 종료")
                    break

                frame = self._source.read()
                if frame is None:
                    logger.info("프레임 소스 종료")
                    break

                try:
                    result = self._pipeline.process(frame, capture_ns=frame.timestamp_ns or None)
                except Exception as exc:
                    # 상세 트레이스백은 파이프라인에서 기록, 해당 프레임만 건너뜀
                    self._failed += 1
                    logger.warning(f"프레임 처리 실패로 건너뜀: failed={self._failed}, error={exc}")
                    result = None

                if result is not None:
                    self._processed += 1
                    if self._show_preview and not self._pipeline.compositor.display(result.image):
                        logger.info("사용자가 프리뷰 창을 닫아 프레임 루프 종료")
                        break

                if self._max_frames and self._processed >= self._max_frames:
                    logger.info(f"{self._max_frames}개 프레임 처리 완료, 프레임 루프 종료")
                    break

                now = time.monotonic()
                if report and now - last_report >= self._config.metrics.report_interval_sec:
                    _log_report(self._pipeline)
                    last_report = now

                remaining = frame_interval - (now - tick)
                if remaining > 0:
                    self._shutdown_event.wait(remaining)
        finally:
            self._shutdown_event.set()
            logger.info(
                f"프레임 루프 종료: {self._processed}개 프레임 처리, {self._failed}개 실패"
            )


def _log_report(pipeline: FramePipeline) -> None:
    """현재 성능 스냅샷을 INFO 로그로 출력합니다."""
    m = pipeline.snapshot()
    logger.info(
        f"성능 리포트: fps={m.fps:.1f}, process={m.process_latency_ms:.2f}ms, "
        f"e2e={m.end_to_end_latency_ms:.2f}ms, yuv={m.yuv_latency_ms:.2f}ms, "
        f"filter={m.filter_latency_ms:.2f}ms, display={m.display_latency_ms:.2f}ms, "
        f"frames={m.frame_count}, drops={m.drop_count}, "
        f"mode={m.execution_mode.name}, filter_type={m.filter_type.name}, "
        f"throughput={m.throughput_mb_s:.1f}MB/s"
    )


# =============================================================================
# 진입점
# =============================================================================

def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="Realtime-Filter-Pipeline: 실시간 YUV 변환 + 이미지 필터 파이프라인"
    )
    parser.add_argument(
        "--config", default="config.yaml", help="설정 파일 경로 (기본: config.yaml)"
    )
    parser.add_argument(
        "--mode", choices=["synthetic", "file"], help="프레임 소스 모드 (config.yaml 오버라이드)"
    )
    parser.add_argument("--video", help="입력 비디오 파일 경로 (file 모드 전용)")
    parser.add_argument("--filter", help="필터 이름 (NONE, GRAYSCALE, SOBEL_EDGE, ...)")
    parser.add_argument("--exec-mode", help="실행 모드 (BASELINE, SIMD, GPU, HYBRID)")
    parser.add_argument("--scale", type=int, help="다운스케일 배율 (>= 1)")
    parser.add_argument(
        "--no-display", action="store_true", help="OpenCV 화면 출력 비활성화"
    )
    parser.add_argument(
        "--no-dashboard", action="store_true", help="TUI 대시보드 비활성화"
    )
    parser.add_argument(
        "--duration", type=float, default=0.0, help="실행 시간 제한 (초, 0=무제한)"
    )
    parser.add_argument(
        "--frames", type=int, default=0, help="처리할 프레임 수 제한 (0=무제한)"
    )
    parser.add_argument(
        "--export-csv", nargs="?", const="",
        help="종료 시 롤링 윈도우 성능 CSV 저장 (경로 생략 시 metrics_output_dir/performance.csv)",
    )
    return parser.parse_args(argv)


def _apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """커맨드라인 값을 설정에 반영한 새 AppConfig를 만듭니다."""
    config_dict = config.model_dump()
    if args.mode:
        config_dict["system"]["mode"] = args.mode
    if args.video:
        config_dict["capture"]["video_path"] = args.video
        if not args.mode:
            config_dict["system"]["mode"] = "file"
    if args.filter:
        config_dict["pipeline"]["filter"] = args.filter
    if args.exec_mode:
        config_dict["pipeline"]["execution_mode"] = args.exec_mode
    if args.scale is not None:
        config_dict["pipeline"]["scale_factor"] = args.scale
    if args.no_display:
        config_dict["compositor"]["show_preview"] = False
    if args.no_dashboard:
        config_dict["dashboard"]["type"] = "none"
    return AppConfig(**config_dict)


def main(argv: Optional[list[str]] = None) -> int:
    """메인 함수입니다. 종료 코드를 반환합니다."""
    args = _parse_args(argv)

    # 설정 로드
    manager = ConfigManager()
    config_found = True
    try:
        config = manager.load(args.config)
    except ConfigFileNotFoundError:
        config_found = False
        config = AppConfig()

    config = _apply_cli_overrides(config, args)
    use_dashboard = config.dashboard.type == "tui"

    setup_logging(config, console=not use_dashboard)
    if not config_found:
        logger.warning(f"설정 파일이 없어 기본 설정으로 실행합니다: {args.config}")

    logger.info(
        f"Realtime-Filter-Pipeline 시작: mode={config.system.mode}, "
        f"filter={config.pipeline.filter}, execution_mode={config.pipeline.execution_mode}, "
        f"scale={config.pipeline.scale_factor}"
    )

    try:
        source = create_frame_source(config)
    except FrameSourceError as exc:
        logger.error(f"프레임 소스 생성 실패: {exc}")
        return 1

    pipeline = FramePipeline(config)
    loop = FrameLoop(
        config,
        pipeline,
        source,
        no_display=args.no_display,
        max_frames=args.frames,
        duration_sec=args.duration,
    )

    # 핫스왑 설정 감시 등록
    if config_found:
        manager.subscribe(pipeline.apply_config)
        manager.watch()

    def _signal_handler(signum, frame):
        logger.info(f"종료 시그널 수신: {signum}")
        loop.request_shutdown()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        if use_dashboard:
            _run_with_dashboard(config, pipeline, loop)
        else:
            loop.run()
    finally:
        manager.stop_watch()
        source.close()
        pipeline.compositor.close()
        if args.export_csv is not None:
            csv_path = args.export_csv or Path(config.metrics.metrics_output_dir) / "performance.csv"
            pipeline.tracker.export_csv(csv_path)
        _log_report(pipeline)

    logger.info("Realtime-Filter-Pipeline 종료")
    return 0


def _run_with_dashboard(config: AppConfig, pipeline: FramePipeline, loop: FrameLoop) -> None:
    """프레임 루프를 작업 스레드에서 실행하고 TUI 대시보드를 메인 스레드에서 실행합니다."""
    from src.dashboard.tui_dashboard import TuiDashboard

    dashboard = TuiDashboard(config, pipeline.metrics_store, controller=pipeline)

    def _worker() -> None:
        try:
            loop.run(report=False)
        finally:
            if dashboard.is_running:
                dashboard.call_from_thread(dashboard.exit)

    worker = threading.Thread(target=_worker, name="frame-loop", daemon=True)
    worker.start()
    try:
        dashboard.run()
    finally:
        loop.request_shutdown()
        worker.join(timeout=5)


if __name__ == "__main__":
    raise SystemExit(main())
