"""
DashboardGenerator_plotter.py

【功能說明】
------------------------------------------------------------
本模組負責生成 Dash 界面布局：標題欄、民調散點圖卡片（含提示框與清除選取按鈕）、
模型預測線卡片，以及兩張圖表各自的互動狀態儲存（dcc.Store）。

【組件 ID】
------------------------------------------------------------
| ID                             | 用途                         |
|--------------------------------|------------------------------|
| polls-chart                    | 民調散點圖                   |
| polls-tooltip                  | 散點提示框                   |
| polls-clear-selection          | 清除機構選取                 |
| polls-interaction-store        | 散點圖控制器狀態             |
| predictions-chart              | 模型預測線                   |
| predictions-interaction-store  | 預測線控制器狀態             |

【常見易錯點】
------------------------------------------------------------
- 組件 ID 變動時需同步更新 CallbackHandler
- dcc.Graph 必須設定 clear_on_unhover=True，游標離開時 hoverData 才會變回 None，
  CallbackHandler 以此判斷 leave 事件
"""

import logging
from typing import Any, Dict, Optional

import dash
import dash_bootstrap_components as dbc
from dash import dcc, html

from .utils import create_dash_app

POLLS_CHART_ID = "polls-chart"
POLLS_TOOLTIP_ID = "polls-tooltip"
POLLS_CLEAR_ID = "polls-clear-selection"
POLLS_STORE_ID = "polls-interaction-store"
PREDICTIONS_CHART_ID = "predictions-chart"
PREDICTIONS_STORE_ID = "predictions-interaction-store"

GRAPH_CONFIG = {"displayModeBar": False, "scrollZoom": False}


def tooltip_style(opacity: float, left: float, top: float, transition_ms: int = 0) -> Dict[str, Any]:
    """提示框樣式；位置以圖表容器左上角為原點"""
    return {
        "position": "absolute",
        "left": f"{left}px",
        "top": f"{top}px",
        "opacity": opacity,
        "transition": f"opacity {transition_ms}ms" if transition_ms else "none",
        "backgroundColor": "white",
        "border": "solid",
        "borderWidth": "1px",
        "borderRadius": "5px",
        "padding": "10px",
        "pointerEvents": "none",
        "whiteSpace": "nowrap",
    }


class DashboardGenerator:
    """
    Dash 界面生成器

    Args:
        logger: 日誌記錄器，預設為 None
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("popularity.plotter.dashboard")
        self.app = None

    def create_app(
        self,
        figures: Dict[str, Dict[str, Any]],
        url_base_pathname: Optional[str] = None,
    ) -> dash.Dash:
        """
        創建 Dash 應用

        Args:
            figures: {"polls": 初始散點圖, "predictions": 初始預測線圖}
            url_base_pathname: URL 路徑前綴

        Returns:
            dash.Dash: Dash 應用實例
        """
        layout = self.create_layout(figures)
        self.app = create_dash_app(
            layout,
            app_title="Popularity Dashboard",
            url_base_pathname=url_base_pathname,
            logger=self.logger,
        )
        return self.app

    def create_layout(self, figures: Dict[str, Dict[str, Any]]) -> html.Div:
        return html.Div(
            [
                self._create_header(),
                dbc.Container(
                    [
                        dbc.Row(dbc.Col(self._create_polls_card(figures.get("polls")))),
                        dbc.Row(
                            dbc.Col(self._create_predictions_card(figures.get("predictions"))),
                            className="mt-4",
                        ),
                    ],
                    fluid=False,
                ),
                dcc.Store(id=POLLS_STORE_ID, data=None),
                dcc.Store(id=PREDICTIONS_STORE_ID, data=None),
            ]
        )

    def _create_header(self) -> html.Div:
        """創建標題欄"""
        return html.Div(
            [
                dbc.Navbar(
                    dbc.Container([dbc.NavbarBrand("Presidential approval", className="ms-2")]),
                    color="#2E3440",
                    dark=True,
                    className="mb-4",
                )
            ]
        )

    def _create_polls_card(self, figure: Optional[Dict[str, Any]]) -> dbc.Card:
        return dbc.Card(
            [
                dbc.CardHeader(
                    [
                        html.Span("Polls"),
                        dbc.Button(
                            "Clear selection",
                            id=POLLS_CLEAR_ID,
                            color="secondary",
                            size="sm",
                            outline=True,
                            className="float-end",
                            n_clicks=0,
                        ),
                    ]
                ),
                dbc.CardBody(
                    html.Div(
                        [
                            dcc.Graph(
                                id=POLLS_CHART_ID,
                                figure=figure or {},
                                config=GRAPH_CONFIG,
                                clear_on_unhover=True,
                            ),
                            html.Div(
                                id=POLLS_TOOLTIP_ID,
                                className="tooltip-box",
                                style=tooltip_style(0, 0, 0),
                            ),
                        ],
                        style={"position": "relative"},
                    )
                ),
            ]
        )

    def _create_predictions_card(self, figure: Optional[Dict[str, Any]]) -> dbc.Card:
        return dbc.Card(
            [
                dbc.CardHeader("Model"),
                dbc.CardBody(
                    dcc.Graph(
                        id=PREDICTIONS_CHART_ID,
                        figure=figure or {},
                        config=GRAPH_CONFIG,
                        clear_on_unhover=True,
                    )
                ),
            ]
        )
