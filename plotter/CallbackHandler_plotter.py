"""
CallbackHandler_plotter.py

【功能說明】
------------------------------------------------------------
本模組把 Dash 的游標事件轉交給各圖表的 InteractionController，
並把控制器產生的視覺屬性寫回圖表、提示框與狀態儲存。

【事件對應】
------------------------------------------------------------
| Dash 屬性                     | 控制器事件                  |
|-------------------------------|-----------------------------|
| polls-chart.hoverData（有值） | on_enter（若 idle）+ on_move |
| polls-chart.hoverData（None） | on_leave                    |
| polls-chart.clickData         | on_click                    |
| polls-clear-selection.n_clicks| clear_selection             |
| predictions-chart.hoverData   | on_enter + on_move / on_leave |

```mermaid
flowchart TD
    A[dcc.Graph hover/click] -->|回調| B[handle_*_event]
    S[dcc.Store] -->|from_state| C[InteractionController]
    B --> C
    C -->|to_state| S
    C -->|樣式/註解| D[ChartComponents]
    D -->|figure| A
```

【常見易錯點】
------------------------------------------------------------
- 控制器狀態只存在各圖表的 dcc.Store，不可放在模組層級變數
- 散點 move 事件不重繪圖表（no_update），只更新提示框
- 數據載入失敗的圖表不註冊互動回調，保持空白
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from dash import Input, Output, State, ctx, html, no_update

from dataloader.records_loader import PollRecord, PredictionRecord

from .ChartComponents_plotter import ChartComponents
from .DashboardGenerator_plotter import (
    POLLS_CHART_ID,
    POLLS_CLEAR_ID,
    POLLS_STORE_ID,
    POLLS_TOOLTIP_ID,
    PREDICTIONS_CHART_ID,
    PREDICTIONS_STORE_ID,
    tooltip_style,
)
from .InteractionController_plotter import (
    LineInteractionController,
    ScatterInteractionController,
)
from .PointIndex_plotter import PointIndex
from .ScaleMapper_plotter import LinearScale, TimeScale

HOVER_TRIGGER = "hoverData"
CLICK_TRIGGER = "clickData"
CLEAR_TRIGGER = "n_clicks"


def _first_point(event_data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not event_data:
        return None
    points = event_data.get("points") or []
    return points[0] if points else None


class CallbackHandler:
    """
    Dash 回調處理器

    Args:
        charts: 圖表組件生成器（提供邊距與繪圖區尺寸）
        x_scale / y_scale: 兩張圖表共用的比例尺
        tooltip_offset: 散點提示框相對游標的位移
        transition_ms: 淡出與散點樣式轉場時間
    """

    def __init__(
        self,
        charts: ChartComponents,
        x_scale: TimeScale,
        y_scale: LinearScale,
        tooltip_offset: Tuple[float, float] = (90, 0),
        transition_ms: int = 200,
        logger: Optional[logging.Logger] = None,
    ):
        self.charts = charts
        self.x_scale = x_scale
        self.y_scale = y_scale
        self.tooltip_offset = tooltip_offset
        self.transition_ms = transition_ms
        self.logger = logger or logging.getLogger("popularity.plotter.callbacks")
        self._point_index: Optional[PointIndex] = None

    # ------------------------------------------------------------------
    # 控制器建構
    # ------------------------------------------------------------------
    def scatter_controller(
        self, records: Sequence[PollRecord], stored: Optional[Dict[str, Any]]
    ) -> ScatterInteractionController:
        return ScatterInteractionController.from_state(
            records,
            stored,
            tooltip_offset=self.tooltip_offset,
            transition_ms=self.transition_ms,
        )

    def point_index(self, records: Sequence[PredictionRecord]) -> PointIndex:
        """每個預測數據集只建一次索引，之後的事件共用"""
        if self._point_index is None or self._point_index.records is not records:
            self._point_index = PointIndex(records, self.x_scale)
        return self._point_index

    def line_controller(
        self, records: Sequence[PredictionRecord], stored: Optional[Dict[str, Any]]
    ) -> LineInteractionController:
        return LineInteractionController.from_state(
            records,
            stored,
            index=self.point_index(records),
            x_scale=self.x_scale,
            y_scale=self.y_scale,
            plot_height=self.charts.plot_height,
            transition_ms=self.transition_ms,
        )

    # ------------------------------------------------------------------
    # 事件處理（不依賴 Dash 執行環境，可直接測試）
    # ------------------------------------------------------------------
    def pointer_position(self, point: Dict[str, Any], record: PollRecord) -> Tuple[float, float]:
        """游標在圖表容器內的像素座標；優先使用 plotly 提供的 bbox"""
        bbox = point.get("bbox")
        if bbox:
            return (bbox["x0"] + bbox["x1"]) / 2, (bbox["y0"] + bbox["y1"]) / 2
        margin = self.charts.margin
        return (
            margin["left"] + self.x_scale(record.field_date),
            margin["top"] + self.y_scale(record.approve_pct),
        )

    def handle_polls_event(
        self,
        records: Sequence[PollRecord],
        trigger: Optional[str],
        hover_data: Optional[Dict[str, Any]],
        click_data: Optional[Dict[str, Any]],
        stored: Optional[Dict[str, Any]],
    ) -> Tuple[Any, Any, Dict[str, Any], Dict[str, Any]]:
        """
        處理散點圖事件

        Returns:
            (figure 或 no_update, 提示框內容, 提示框樣式, 新的控制器狀態)
        """
        controller = self.scatter_controller(records, stored)
        previous_mode = (controller.marker_mode, controller.selected_pollster)

        if trigger == HOVER_TRIGGER:
            point = _first_point(hover_data)
            if point is None:
                controller.on_leave()
            else:
                record = records[int(point["customdata"])]
                if not controller.is_hidden(record):
                    controller.on_enter()
                    controller.on_move(record, self.pointer_position(point, record))
        elif trigger == CLICK_TRIGGER:
            point = _first_point(click_data)
            if point is not None:
                controller.on_click(records[int(point["customdata"])])
        elif trigger == CLEAR_TRIGGER:
            controller.clear_selection()

        if (controller.marker_mode, controller.selected_pollster) != previous_mode:
            figure = self.charts.create_scatter_figure(records, controller)
        else:
            figure = no_update

        tooltip = controller.tooltip
        children = []
        for i, line in enumerate(tooltip.lines):
            if i:
                children.append(html.Br())
            children.append(line)
        style = tooltip_style(tooltip.opacity, tooltip.left, tooltip.top, tooltip.transition_ms)
        return figure, children, style, controller.to_state()

    def pointer_x(self, point: Dict[str, Any]) -> float:
        """感應層點的 customdata 即為像素 x；其他 trace 皆不觸發 hover"""
        return float(point["customdata"])

    def handle_predictions_event(
        self,
        records: Sequence[PredictionRecord],
        hover_data: Optional[Dict[str, Any]],
        stored: Optional[Dict[str, Any]],
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        處理預測線事件

        Returns:
            (figure, 新的控制器狀態)
        """
        controller = self.line_controller(records, stored)
        point = _first_point(hover_data)
        if point is None:
            controller.on_leave()
        else:
            controller.on_enter()
            controller.on_move(self.pointer_x(point))
        return self.charts.create_line_figure(records, controller), controller.to_state()

    # ------------------------------------------------------------------
    # Dash 註冊
    # ------------------------------------------------------------------
    def setup_callbacks(self, app, data: Dict[str, Any]) -> None:
        polls = data.get("polls")
        predictions = data.get("predictions")

        if polls is not None:
            @app.callback(
                Output(POLLS_CHART_ID, "figure"),
                Output(POLLS_TOOLTIP_ID, "children"),
                Output(POLLS_TOOLTIP_ID, "style"),
                Output(POLLS_STORE_ID, "data"),
                Input(POLLS_CHART_ID, "hoverData"),
                Input(POLLS_CHART_ID, "clickData"),
                Input(POLLS_CLEAR_ID, "n_clicks"),
                State(POLLS_STORE_ID, "data"),
                prevent_initial_call=True,
            )
            def update_polls(hover_data, click_data, clear_clicks, stored):
                prop = ctx.triggered[0]["prop_id"].split(".")[-1] if ctx.triggered else None
                return self.handle_polls_event(polls, prop, hover_data, click_data, stored)

        else:
            self.logger.warning("民調數據不可用，散點圖不註冊互動回調")

        if predictions is not None:
            @app.callback(
                Output(PREDICTIONS_CHART_ID, "figure"),
                Output(PREDICTIONS_STORE_ID, "data"),
                Input(PREDICTIONS_CHART_ID, "hoverData"),
                State(PREDICTIONS_STORE_ID, "data"),
                prevent_initial_call=True,
            )
            def update_predictions(hover_data, stored):
                return self.handle_predictions_event(predictions, hover_data, stored)

        else:
            self.logger.warning("模型預測不可用，預測線不註冊互動回調")
