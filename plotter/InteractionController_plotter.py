"""
InteractionController_plotter.py

【功能說明】
------------------------------------------------------------
每張圖表一個互動控制器：以明確的狀態機處理游標進入 / 移動 / 離開（散點圖另有點擊），
並更新提示框、註解與散點樣式等視覺屬性。紀錄本身永遠不會被修改。

【狀態機】
------------------------------------------------------------
```mermaid
stateDiagram-v2
    [*] --> idle
    idle --> hovering: enter
    hovering --> hovering: move
    hovering --> idle: leave
```
- 散點圖的「選取機構」與 hover 狀態正交：click 設定後一直保留，
  直到按下清除按鈕；再次點擊不會取消選取
- 選取模式下其他機構的散點半徑為 0，hover 與 click 都不會落在它們身上
- 狀態不正確的事件（例如 idle 時收到 move）直接忽略

【與其他模組的關聯】
------------------------------------------------------------
- CallbackHandler 每次回調以 from_state() 重建控制器，處理事件後以 to_state()
  寫回該圖表的 dcc.Store，因此沒有模組層級的共享狀態
- 文字內容來自 AnnotationRenderer，位置來自 ScaleMapper / PointIndex
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dataloader.records_loader import PollRecord, PredictionRecord

from .AnnotationRenderer_plotter import (
    format_headline,
    format_poll_tooltip,
    lagged_display_month,
)
from .PointIndex_plotter import PointIndex
from .ScaleMapper_plotter import LinearScale, TimeScale

TRANSITION_MS = 200
SCATTER_TOOLTIP_OFFSET = (90, 0)


class InteractionState(str, Enum):
    IDLE = "idle"
    HOVERING = "hovering"


@dataclass(frozen=True)
class MarkerStyle:
    fill: str
    radius: float
    opacity: float
    stroke: str = "white"


# 初次繪製
INITIAL_MARKER = MarkerStyle(fill="#81A1C1", radius=4, opacity=0.5)
# 離開圖表後（無選取）
DEFAULT_MARKER = MarkerStyle(fill="#d8dee9", radius=4, opacity=1.0)
SELECTED_MARKER = MarkerStyle(fill="#2E3440", radius=4, opacity=1.0)
HIDDEN_MARKER = MarkerStyle(fill="white", radius=0, opacity=1.0)

MARKER_MODES = ("initial", "default", "selected")


@dataclass
class Tooltip:
    opacity: float = 0.0
    lines: List[str] = field(default_factory=list)
    left: float = 0.0
    top: float = 0.0
    transition_ms: int = 0


@dataclass
class LineAnnotation:
    opacity: float = 0.0
    headline: str = ""
    headline_x: float = 0.0
    headline_y: float = 0.0
    date_label: str = ""
    date_x: float = 0.0
    date_y: float = 0.0
    line_x: float = 0.0
    transition_ms: int = 0


class ScatterInteractionController:
    """
    散點圖互動控制器

    Attributes:
        state: 目前 hover 狀態
        selected_pollster: 點擊選取的機構（None 代表未選取）
        marker_mode: 散點樣式模式（initial / default / selected）
        tooltip: 提示框視覺屬性
    """

    def __init__(
        self,
        records: Sequence[PollRecord],
        tooltip_offset: Tuple[float, float] = SCATTER_TOOLTIP_OFFSET,
        transition_ms: int = TRANSITION_MS,
        logger: Optional[logging.Logger] = None,
    ):
        self.records = records
        self.tooltip_offset = (float(tooltip_offset[0]), float(tooltip_offset[1]))
        self.transition_ms = transition_ms
        self.logger = logger or logging.getLogger("popularity.plotter.scatter")

        self.state = InteractionState.IDLE
        self.selected_pollster: Optional[str] = None
        self.marker_mode = "initial"
        self.tooltip = Tooltip()

    def on_enter(self) -> None:
        if self.state is InteractionState.HOVERING:
            self.logger.debug("enter 事件於 hovering 狀態，忽略")
            return
        self.state = InteractionState.HOVERING
        self.tooltip.opacity = 1.0
        self.tooltip.transition_ms = 0

    def on_move(self, record: PollRecord, pointer: Tuple[float, float]) -> None:
        if self.state is not InteractionState.HOVERING:
            self.logger.debug("move 事件於 idle 狀態，忽略")
            return
        if self.is_hidden(record):
            self.logger.debug(f"move 事件落在隱藏的機構 {record.pollster_id}，忽略")
            return
        dx, dy = self.tooltip_offset
        self.tooltip.lines = format_poll_tooltip(record)
        self.tooltip.left = pointer[0] + dx
        self.tooltip.top = pointer[1] + dy

    def on_leave(self) -> None:
        if self.state is not InteractionState.HOVERING:
            self.logger.debug("leave 事件於 idle 狀態，忽略")
            return
        self.state = InteractionState.IDLE
        self.tooltip.opacity = 0.0
        self.tooltip.transition_ms = self.transition_ms
        self.marker_mode = "selected" if self.selected_pollster is not None else "default"

    def on_click(self, record: PollRecord) -> None:
        if self.is_hidden(record):
            self.logger.debug(f"click 事件落在隱藏的機構 {record.pollster_id}，忽略")
            return
        self.selected_pollster = record.pollster_id
        self.marker_mode = "selected"
        self.logger.info(f"選取民調機構: {record.pollster_id}")

    def clear_selection(self) -> None:
        self.selected_pollster = None
        self.marker_mode = "default"

    def is_hidden(self, record: PollRecord) -> bool:
        """選取模式下其他機構的散點半徑為 0，不接收游標事件"""
        return self.marker_mode == "selected" and record.pollster_id != self.selected_pollster

    def marker_style(self, record: PollRecord) -> MarkerStyle:
        if self.marker_mode == "selected":
            if record.pollster_id == self.selected_pollster:
                return SELECTED_MARKER
            return HIDDEN_MARKER
        if self.marker_mode == "default":
            return DEFAULT_MARKER
        return INITIAL_MARKER

    @property
    def markers(self) -> List[MarkerStyle]:
        """依紀錄順序的散點樣式"""
        return [self.marker_style(r) for r in self.records]

    @property
    def marker_transition_ms(self) -> int:
        return 0 if self.marker_mode == "initial" else self.transition_ms

    def to_state(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "selected_pollster": self.selected_pollster,
            "marker_mode": self.marker_mode,
            "tooltip": {
                "opacity": self.tooltip.opacity,
                "lines": list(self.tooltip.lines),
                "left": self.tooltip.left,
                "top": self.tooltip.top,
                "transition_ms": self.tooltip.transition_ms,
            },
        }

    @classmethod
    def from_state(
        cls,
        records: Sequence[PollRecord],
        stored: Optional[Dict[str, Any]],
        **kwargs: Any,
    ) -> "ScatterInteractionController":
        controller = cls(records, **kwargs)
        if not stored:
            return controller
        controller.state = InteractionState(stored.get("state", "idle"))
        controller.selected_pollster = stored.get("selected_pollster")
        mode = stored.get("marker_mode", "initial")
        controller.marker_mode = mode if mode in MARKER_MODES else "initial"
        controller.tooltip = Tooltip(**stored.get("tooltip", {}))
        return controller


class LineInteractionController:
    """
    預測線互動控制器

    以 PointIndex 依游標像素查找紀錄，重繪大標題、日期標籤與垂直追蹤線。
    """

    def __init__(
        self,
        records: Sequence[PredictionRecord],
        x_scale: TimeScale,
        y_scale: LinearScale,
        plot_height: float,
        transition_ms: int = TRANSITION_MS,
        logger: Optional[logging.Logger] = None,
        index: Optional[PointIndex] = None,
    ):
        self.records = records
        self.x_scale = x_scale
        self.y_scale = y_scale
        self.plot_height = plot_height
        self.transition_ms = transition_ms
        self.logger = logger or logging.getLogger("popularity.plotter.line")
        # 同一數據集共用呼叫端傳入的索引
        self.index = index if index is not None else PointIndex(records, x_scale)

        self.state = InteractionState.IDLE
        self.last_index: Optional[int] = None
        self.annotation = LineAnnotation()

    @property
    def selected(self) -> Optional[PredictionRecord]:
        if self.last_index is None:
            return None
        return self.records[self.last_index]

    def on_enter(self) -> None:
        if self.state is InteractionState.HOVERING:
            self.logger.debug("enter 事件於 hovering 狀態，忽略")
            return
        self.state = InteractionState.HOVERING
        self.annotation.opacity = 1.0
        self.annotation.transition_ms = 0
        if self.records:
            # 預設顯示最後一筆
            self._repaint(self.last_index if self.last_index is not None else len(self.records) - 1)

    def on_move(self, x_px: float) -> None:
        if self.state is not InteractionState.HOVERING:
            self.logger.debug("move 事件於 idle 狀態，忽略")
            return
        if not self.records:
            return
        index, _ = self.index.lookup(x_px)
        self._repaint(index)

    def on_leave(self) -> None:
        if self.state is not InteractionState.HOVERING:
            self.logger.debug("leave 事件於 idle 狀態，忽略")
            return
        self.state = InteractionState.IDLE
        self.annotation.opacity = 0.0
        self.annotation.transition_ms = self.transition_ms

    def _repaint(self, index: int) -> None:
        record = self.records[index]
        x = self.x_scale(record.date)
        self.last_index = index
        self.annotation.headline = format_headline(record)
        self.annotation.headline_x = x + 15
        self.annotation.headline_y = self.y_scale(record.mean_pct) - 25
        self.annotation.date_label = lagged_display_month(record.date)
        self.annotation.date_x = x
        self.annotation.date_y = self.plot_height
        self.annotation.line_x = x

    def to_state(self) -> Dict[str, Any]:
        return {"state": self.state.value, "last_index": self.last_index}

    @classmethod
    def from_state(
        cls,
        records: Sequence[PredictionRecord],
        stored: Optional[Dict[str, Any]],
        **kwargs: Any,
    ) -> "LineInteractionController":
        controller = cls(records, **kwargs)
        if not stored:
            return controller
        controller.state = InteractionState(stored.get("state", "idle"))
        last_index = stored.get("last_index")
        if last_index is not None and 0 <= last_index < len(records):
            controller._repaint(last_index)
        hovering = controller.state is InteractionState.HOVERING
        controller.annotation.opacity = 1.0 if hovering else 0.0
        controller.annotation.transition_ms = 0 if hovering else controller.transition_ms
        return controller
