"""
ChartComponents_plotter.py

【功能說明】
------------------------------------------------------------
本模組負責生成兩張 Plotly 圖表：
- 民調散點圖：每個機構一條 trace，散點樣式由 ScatterInteractionController 決定
- 模型預測線：平均線、HDI 50% 與外層 HDI 區間、感應層、註解與垂直追蹤線

【流程與數據流】
------------------------------------------------------------
```mermaid
flowchart TD
    A[紀錄列表] -->|create_*_figure| B[go.Figure]
    C[InteractionController] -->|樣式/註解| B
    B -->|to_dict| D[dcc.Graph.figure]
```

【常見易錯點】
------------------------------------------------------------
- Plotly marker.size 為直徑，半徑 4 對應 size 8
- 註解與垂直線以 paper 座標（0~1）定位，需由繪圖區像素換算
- 感應層每個像素欄一個透明點，customdata 為該欄像素 x，供 PointIndex 使用
- x 軸固定 2017-05-01 ~ 2022-05-01，y 軸固定 0 ~ 100
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import plotly.graph_objs as go

from dataloader.records_loader import PollRecord, PredictionRecord
from utils import css_class_token

from .InteractionController_plotter import (
    LineInteractionController,
    ScatterInteractionController,
)
from .ScaleMapper_plotter import TimeScale

MEAN_LINE_COLOR = "steelblue"
BAND_COLOR = "rgba(129, 161, 193, {alpha})"  # #81A1C1
HEADLINE_FONT_SIZE = 34


class ChartComponents:
    """
    圖表組件生成器

    負責生成散點圖與預測線圖，所有幾何參數來自配置。
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 500,
        margin: Optional[Dict[str, int]] = None,
        x_domain: Sequence[str] = ("2017-05-01", "2022-05-01"),
        y_domain: Sequence[float] = (0, 100),
        logger: Optional[logging.Logger] = None,
    ):
        self.width = width
        self.height = height
        self.margin = margin or {"top": 10, "right": 30, "bottom": 30, "left": 60}
        self.x_domain = list(x_domain)
        self.y_domain = list(y_domain)
        self.logger = logger or logging.getLogger("popularity.plotter.charts")

    @property
    def plot_width(self) -> int:
        return self.width - self.margin["left"] - self.margin["right"]

    @property
    def plot_height(self) -> int:
        return self.height - self.margin["top"] - self.margin["bottom"]

    def _base_layout(self, transition_ms: int = 0) -> Dict[str, Any]:
        layout: Dict[str, Any] = dict(
            template=None,
            width=self.width,
            height=self.height,
            margin=dict(
                l=self.margin["left"],
                r=self.margin["right"],
                t=self.margin["top"],
                b=self.margin["bottom"],
                pad=0,
            ),
            plot_bgcolor="white",
            paper_bgcolor="white",
            showlegend=False,
            font=dict(color="#2E3440", size=12),
            xaxis=dict(
                type="date",
                range=self.x_domain,
                fixedrange=True,
                showgrid=False,
                showline=True,
                linecolor="#2E3440",
                ticks="outside",
            ),
            yaxis=dict(
                range=self.y_domain,
                fixedrange=True,
                showgrid=False,
                showline=True,
                linecolor="#2E3440",
                ticks="outside",
            ),
            dragmode=False,
        )
        if transition_ms:
            layout["transition"] = dict(duration=transition_ms, easing="cubic-in-out")
        return layout

    def create_blank_figure(self) -> Dict[str, Any]:
        """數據載入失敗時的空白圖表（只有固定座標軸）"""
        fig = go.Figure()
        fig.update_layout(**self._base_layout())
        return fig.to_dict()

    def create_scatter_figure(
        self,
        records: Sequence[PollRecord],
        controller: ScatterInteractionController,
    ) -> Dict[str, Any]:
        """
        創建民調散點圖

        Args:
            records: 民調紀錄（來源順序）
            controller: 提供每個散點的樣式

        Returns:
            dict: Plotly 圖表配置
        """
        try:
            fig = go.Figure()

            # 依機構首次出現順序分組，customdata 保存全域索引
            groups: Dict[str, List[int]] = {}
            for i, record in enumerate(records):
                groups.setdefault(record.pollster_id, []).append(i)

            for pollster, indices in groups.items():
                styles = [controller.marker_style(records[i]) for i in indices]
                # 隱藏的機構（半徑 0）不接收 hover 與 click
                hidden = controller.is_hidden(records[indices[0]])
                fig.add_trace(
                    go.Scatter(
                        x=[records[i].field_date for i in indices],
                        y=[records[i].approve_pct for i in indices],
                        mode="markers",
                        name=pollster,
                        uid=f"dot-{css_class_token(pollster)}",
                        customdata=indices,
                        marker=dict(
                            size=[2 * s.radius for s in styles],
                            color=[s.fill for s in styles],
                            opacity=[s.opacity for s in styles],
                            line=dict(color=[s.stroke for s in styles], width=1),
                        ),
                        hoverinfo="skip" if hidden else "none",
                    )
                )

            fig.update_layout(
                **self._base_layout(controller.marker_transition_ms),
                hovermode="closest",
                uirevision="polls",
            )
            return fig.to_dict()

        except Exception as e:
            self.logger.error(f"創建民調散點圖失敗: {e}")
            raise

    def _sensing_trace(self, x_scale: TimeScale) -> go.Scatter:
        pixels = list(range(0, self.plot_width + 1))
        return go.Scatter(
            x=[x_scale.invert(px) for px in pixels],
            y=[sum(self.y_domain) / 2] * len(pixels),
            mode="markers",
            name="sensing",
            customdata=pixels,
            marker=dict(size=1, opacity=0),
            hoverinfo="none",
        )

    def create_line_figure(
        self,
        records: Sequence[PredictionRecord],
        controller: LineInteractionController,
    ) -> Dict[str, Any]:
        """
        創建模型預測線圖

        Args:
            records: 依日期遞增的預測紀錄
            controller: 提供註解內容、位置與可見度

        Returns:
            dict: Plotly 圖表配置
        """
        try:
            fig = go.Figure()
            dates = [r.date for r in records]

            if records:
                level = records[0].hdi_outer_level
                self._add_band(
                    fig,
                    dates,
                    [r.hdi_outer_low for r in records],
                    [r.hdi_outer_high for r in records],
                    name=f"hdi{level}",
                    alpha=0.2,
                )
                self._add_band(
                    fig,
                    dates,
                    [r.hdi50_low for r in records],
                    [r.hdi50_high for r in records],
                    name="hdi50",
                    alpha=0.35,
                )
                fig.add_trace(
                    go.Scatter(
                        x=dates,
                        y=[r.mean_pct for r in records],
                        mode="lines",
                        name="mean",
                        line=dict(color=MEAN_LINE_COLOR, width=4),
                        hoverinfo="skip",
                    )
                )

            # 感應層放在最上層，接收整個繪圖區的游標位置
            fig.add_trace(self._sensing_trace(controller.x_scale))

            annotation = controller.annotation
            layout = self._base_layout(annotation.transition_ms)
            layout["annotations"] = [
                dict(
                    name="popularity-text",
                    text=annotation.headline,
                    xref="paper",
                    yref="paper",
                    x=self._paper_x(annotation.headline_x),
                    y=self._paper_y(annotation.headline_y),
                    xanchor="left",
                    yanchor="middle",
                    showarrow=False,
                    font=dict(size=HEADLINE_FONT_SIZE, color="black"),
                    opacity=annotation.opacity,
                    visible=bool(annotation.headline),
                ),
                dict(
                    name="popularity-date",
                    text=annotation.date_label,
                    xref="paper",
                    yref="paper",
                    x=self._paper_x(annotation.date_x),
                    y=self._paper_y(annotation.date_y),
                    xanchor="left",
                    yanchor="bottom",
                    showarrow=False,
                    font=dict(size=HEADLINE_FONT_SIZE, color="black"),
                    opacity=annotation.opacity,
                    visible=bool(annotation.date_label),
                ),
            ]
            line_x = self._paper_x(annotation.line_x)
            layout["shapes"] = [
                dict(
                    name="vertical-line",
                    type="line",
                    xref="paper",
                    yref="paper",
                    x0=line_x,
                    x1=line_x,
                    y0=0,
                    y1=1,
                    line=dict(color="black", width=1, dash="dot"),
                    opacity=annotation.opacity,
                    visible=bool(annotation.headline),
                )
            ]
            fig.update_layout(**layout, hovermode="x", uirevision="predictions")
            return fig.to_dict()

        except Exception as e:
            self.logger.error(f"創建模型預測圖失敗: {e}")
            raise

    def _add_band(
        self,
        fig: go.Figure,
        dates: List[Any],
        lows: List[float],
        highs: List[float],
        name: str,
        alpha: float,
    ) -> None:
        fig.add_trace(
            go.Scatter(
                x=dates,
                y=lows,
                mode="lines",
                name=f"{name}-low",
                line=dict(width=0),
                hoverinfo="skip",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=dates,
                y=highs,
                mode="lines",
                name=name,
                line=dict(width=0),
                fill="tonexty",
                fillcolor=BAND_COLOR.format(alpha=alpha),
                hoverinfo="skip",
            )
        )

    def _paper_x(self, px: float) -> float:
        return px / self.plot_width

    def _paper_y(self, py: float) -> float:
        # 像素 y 向下，paper y 向上
        return 1 - py / self.plot_height
