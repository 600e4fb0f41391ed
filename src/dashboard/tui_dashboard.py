"""
Textual 기반 TUI 대시보드 모듈입니다.

역할:
- 5개 패널로 파이프라인 실시간 상태 표시:
  1. FPS (20 이상 양호 / 10 이상 주의 / 그 외 불량 색상)
  2. 지연시간 (전체 처리 / end-to-end 평균)
  3. 단계별 지연시간 + 실행 하드웨어 라벨
  4. 실행 모드 / 필터 / SIMD·GPU 활성 여부
  5. 프레임 정보 (해상도, 누적 프레임, 드롭, 처리량)
- MetricsStore를 refresh_interval_ms 주기로 폴링
- 키 입력(m: 모드 순환, f: 필터 순환, r: 메트릭 초기화)을 파이프라인에 전달

사용 예시:
    >>> dashboard = TuiDashboard(config, metrics_store, controller=pipeline)
    >>> dashboard.run()
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from rich.text import Text
from textual.app import App, ComposeResult
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from src.config.schema import AppConfig
from src.filters import FilterType
from src.filters.backend import ExecutionMode, resolve_capability
from src.metrics import FrameMetrics
from src.metrics.metrics_store import MetricsStore

logger = logging.getLogger(__name__)

# FPS 색상 구간 경계
FPS_GOOD_THRESHOLD = 20.0
FPS_WARN_THRESHOLD = 10.0


def fps_band(fps: float) -> str:
    """FPS 값을 색상 구간 이름(good / warn / bad)으로 분류합니다."""
    if fps >= FPS_GOOD_THRESHOLD:
        return "good"
    if fps >= FPS_WARN_THRESHOLD:
        return "warn"
    return "bad"


_BAND_STYLES = {"good": "bold green", "warn": "bold yellow", "bad": "bold red"}


class PipelineController(Protocol):
    """대시보드 키 입력을 받는 제어 대상 (FramePipeline)입니다."""

    def cycle_mode(self) -> ExecutionMode: ...

    def cycle_filter(self) -> FilterType: ...

    def reset_metrics(self) -> None: ...


# =========================================================================
# 패널 위젯
# =========================================================================

class FpsPanel(Static):
    """프레임레이트 패널입니다."""

    DEFAULT_CSS = """
    FpsPanel {
        border: solid $success;
        padding: 0 2;
        height: 3;
        margin: 0 1 1 1;
    }
    """

    fps: reactive[float] = reactive(0.0)

    @property
    def band(self) -> str:
        return fps_band(self.fps)

    def render(self) -> Text:
        text = Text("FPS  ")
        text.append(f"{self.fps:6.1f}", style=_BAND_STYLES[self.band])
        return text

    def update_fps(self, fps: float) -> None:
        self.fps = max(0.0, fps)


class LatencyPanel(Static):
    """전체 처리 / end-to-end 평균 지연시간 패널입니다."""

    DEFAULT_CSS = """
    LatencyPanel {
        border: solid $warning;
        padding: 0 2;
        height: 4;
        margin: 0 1 1 1;
    }
    """

    process_ms: reactive[float] = reactive(0.0)
    end_to_end_ms: reactive[float] = reactive(0.0)

    def render(self) -> Text:
        return Text(
            f"지연시간\n"
            f"처리: {self.process_ms:7.2f}ms   E2E: {self.end_to_end_ms:7.2f}ms"
        )

    def update_latency(self, process_ms: float, end_to_end_ms: float) -> None:
        self.process_ms = process_ms
        self.end_to_end_ms = end_to_end_ms


class StagePanel(Static):
    """단계별 평균 지연시간과 실행 하드웨어 라벨 패널입니다."""

    DEFAULT_CSS = """
    StagePanel {
        border: solid $primary;
        padding: 0 2;
        height: 6;
        margin: 0 1 1 1;
    }
    """

    stages_text: reactive[str] = reactive("(데이터 없음)")

    def render(self) -> Text:
        return Text(f"단계\n{self.stages_text}")

    def update_stages(self, metrics: FrameMetrics) -> None:
        capability = resolve_capability(metrics.execution_mode)
        rows = (
            ("YUV→ARGB", metrics.yuv_latency_ms, capability.yuv_hardware),
            ("Filter", metrics.filter_latency_ms, capability.filter_hardware),
            ("Display", metrics.display_latency_ms, capability.display_hardware),
        )
        self.stages_text = "\n".join(
            f"{name:9s}: {latency_ms:7.2f}ms {hardware}"
            for name, latency_ms, hardware in rows
        )


class ModePanel(Static):
    """실행 모드 / 필터 패널입니다."""

    DEFAULT_CSS = """
    ModePanel {
        border: solid $secondary;
        padding: 0 2;
        height: 4;
        margin: 0 1 1 1;
    }
    """

    mode_name: reactive[str] = reactive(ExecutionMode.BASELINE.display_name)
    filter_name: reactive[str] = reactive(FilterType.NONE.display_name)
    simd_active: reactive[bool] = reactive(False)
    gpu_active: reactive[bool] = reactive(False)

    def render(self) -> Text:
        simd = "ON" if self.simd_active else "OFF"
        gpu = "ON" if self.gpu_active else "OFF"
        return Text(
            f"모드: {self.mode_name}   필터: {self.filter_name}\n"
            f"SIMD: {simd}   GPU: {gpu}"
        )

    def update_mode(self, mode: ExecutionMode, filter_type: FilterType) -> None:
        capability = resolve_capability(mode)
        self.mode_name = mode.display_name
        self.filter_name = filter_type.display_name
        self.simd_active = capability.simd_active
        self.gpu_active = capability.gpu_active


class FramePanel(Static):
    """프레임 해상도 / 누적 / 드롭 / 처리량 패널입니다."""

    DEFAULT_CSS = """
    FramePanel {
        border: solid $accent;
        padding: 0 2;
        height: 4;
        margin: 0 1 1 1;
    }
    """

    frame_width: reactive[int] = reactive(0)
    frame_height: reactive[int] = reactive(0)
    frame_count: reactive[int] = reactive(0)
    drop_count: reactive[int] = reactive(0)
    throughput_mb_s: reactive[float] = reactive(0.0)

    def render(self) -> Text:
        return Text(
            f"프레임 {self.frame_width}x{self.frame_height}\n"
            f"총: {self.frame_count}  드롭: {self.drop_count}  "
            f"처리량: {self.throughput_mb_s:.1f} MB/s"
        )

    def update_frame(self, metrics: FrameMetrics) -> None:
        self.frame_width = metrics.frame_width
        self.frame_height = metrics.frame_height
        self.frame_count = metrics.frame_count
        self.drop_count = metrics.drop_count
        self.throughput_mb_s = metrics.throughput_mb_s


# =========================================================================
# 메인 TUI 앱
# =========================================================================

class TuiDashboard(App):
    """
    파이프라인 상태를 표시하는 TUI 대시보드입니다.

    MetricsStore를 주기적으로 폴링하여 5개 패널을 갱신하고,
    controller가 주어지면 키 입력으로 모드/필터를 바꿉니다.
    """

    TITLE = "Realtime-Filter-Pipeline Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("m", "cycle_mode", "모드 변경"),
        ("f", "cycle_filter", "필터 변경"),
        ("r", "reset_metrics", "메트릭 초기화"),
        ("q", "quit", "종료"),
    ]

    def __init__(
        self,
        config: AppConfig,
        metrics_store: MetricsStore,
        controller: Optional[PipelineController] = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._config = config
        self._metrics_store = metrics_store
        self._controller = controller
        self._refresh_interval_ms = config.dashboard.refresh_interval_ms

    # =========================================================================
    # UI 구성
    # =========================================================================

    def compose(self) -> ComposeResult:
        yield Header()
        yield FpsPanel(id="fps")
        yield LatencyPanel(id="latency")
        yield StagePanel(id="stages")
        yield ModePanel(id="mode")
        yield FramePanel(id="frame")
        yield Footer()

    def on_mount(self) -> None:
        """앱 마운트 시 폴링 타이머를 시작합니다."""
        interval_sec = self._refresh_interval_ms / 1000.0
        self.set_interval(interval_sec, self._poll_metrics)
        logger.info(f"TUI 대시보드 시작: 갱신 주기={self._refresh_interval_ms}ms")

    # =========================================================================
    # 메트릭 폴링
    # =========================================================================

    def _poll_metrics(self) -> None:
        """MetricsStore에서 최신 스냅샷을 읽어 패널을 갱신합니다."""
        metrics = self._metrics_store.get_frame_metrics()
        self.query_one("#fps", FpsPanel).update_fps(metrics.fps)
        self.query_one("#latency", LatencyPanel).update_latency(
            metrics.process_latency_ms, metrics.end_to_end_latency_ms
        )
        self.query_one("#stages", StagePanel).update_stages(metrics)
        self.query_one("#mode", ModePanel).update_mode(
            metrics.execution_mode, metrics.filter_type
        )
        self.query_one("#frame", FramePanel).update_frame(metrics)

    # =========================================================================
    # 키 입력 액션
    # =========================================================================

    def action_cycle_mode(self) -> None:
        if self._controller is None:
            return
        self._controller.cycle_mode()
        self._poll_metrics()

    def action_cycle_filter(self) -> None:
        if self._controller is None:
            return
        self._controller.cycle_filter()
        self._poll_metrics()

    def action_reset_metrics(self) -> None:
        if self._controller is None:
            return
        self._controller.reset_metrics()
        self._poll_metrics()
