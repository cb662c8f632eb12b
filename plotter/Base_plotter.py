"""
Base_plotter.py

【功能說明】
------------------------------------------------------------
本檔案為 plotter 模組的主流程類，協調數據載入、圖表生成、界面生成、回調處理，
最後啟動 Dash 服務。

【關聯流程與數據流】
------------------------------------------------------------
- 主流程：初始化 → 載入兩個 CSV 來源 → 生成初始圖表 → 界面生成 → 回調設置 → 啟動服務

```mermaid
flowchart TD
    A[BasePlotter] -->|調用| B[PollLoader/PredictionLoader]
    A -->|調用| C[ChartComponents]
    A -->|調用| D[DashboardGenerator]
    A -->|調用| E[CallbackHandler]
    B -->|紀錄| C
    C -->|初始圖表| D
    D -->|Dash應用| E
    E -->|回調| F[Web界面]
```

【錯誤處理】
------------------------------------------------------------
- 兩個來源各自獨立：任一來源載入失敗只會讓對應圖表留白，另一張圖表照常運作
- 失敗原因寫入日誌並以 Rich Panel 顯示於終端，不在頁面上顯示
- 不重試

【範例】
------------------------------------------------------------
- plotter = BasePlotter(config)
- plotter.run()
"""

import logging
from typing import Any, Dict, List, Optional

from dataloader import DataLoaderError, PollLoader, PredictionLoader
from utils import ConfigLoader, DashboardConfig, show_error, show_success

from .CallbackHandler_plotter import CallbackHandler
from .ChartComponents_plotter import ChartComponents
from .DashboardGenerator_plotter import DashboardGenerator
from .ScaleMapper_plotter import build_scales


class BasePlotter:
    """
    可視化平台主流程

    負責協調數據載入、圖表生成、界面生成、回調處理等各個子模組。
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化可視化平台

        Args:
            config: 合併後的配置，預設為 DEFAULT_CONFIG
            logger: 日誌記錄器，預設為 None
        """
        self.config = config or ConfigLoader().load_config()
        self.logger = logger or logging.getLogger("popularity.plotter")
        self.data: Optional[Dict[str, Any]] = None
        self.app = None

        self._init_components()

    def _init_components(self) -> None:
        """初始化各個子模組"""
        plotter_cfg = self.config.plotter
        self.x_scale, self.y_scale = build_scales(
            self.config.plot_width,
            self.config.plot_height,
            x_domain=plotter_cfg["x_domain"],
            y_domain=plotter_cfg["y_domain"],
        )
        self.charts = ChartComponents(
            width=plotter_cfg["width"],
            height=plotter_cfg["height"],
            margin=plotter_cfg["margin"],
            x_domain=plotter_cfg["x_domain"],
            y_domain=plotter_cfg["y_domain"],
            logger=self.logger.getChild("charts"),
        )
        self.dashboard_generator = DashboardGenerator(self.logger.getChild("dashboard"))
        self.callback_handler = CallbackHandler(
            self.charts,
            self.x_scale,
            self.y_scale,
            tooltip_offset=tuple(plotter_cfg["tooltip_offset"]),
            transition_ms=plotter_cfg["transition_ms"],
            logger=self.logger.getChild("callbacks"),
        )
        self.logger.info("plotter 子模組初始化完成")

    def _load_feed(self, name: str, loader, preview: bool) -> Optional[List[Any]]:
        try:
            return loader.load(preview=preview)
        except DataLoaderError as e:
            self.logger.error(f"{name} 載入失敗，圖表將留白: {e}")
            show_error("DATALOADER", f"{name} 載入失敗：{e}", "圖表將保持空白，請檢查來源設定")
            return None

    def load_data(self, preview: bool = False) -> Dict[str, Any]:
        """
        載入兩個 CSV 來源

        Returns:
            Dict[str, Any]: {"polls": 民調紀錄或 None, "predictions": 預測紀錄或 None}
        """
        loader_cfg = self.config.dataloader
        timeout = float(loader_cfg["timeout"])
        polls_loader = PollLoader(
            loader_cfg["polls_source"], timeout, logger=self.logger.getChild("polls")
        )
        predictions_loader = PredictionLoader(
            loader_cfg["predictions_source"], timeout, logger=self.logger.getChild("predictions")
        )

        self.data = {
            "polls": self._load_feed("民調數據", polls_loader, preview),
            "predictions": self._load_feed("模型預測", predictions_loader, preview),
        }
        return self.data

    def initial_figures(self) -> Dict[str, Dict[str, Any]]:
        """未互動前的兩張圖表；載入失敗者為空白圖"""
        if self.data is None:
            self.load_data()

        handler = self.callback_handler
        polls = self.data.get("polls")
        predictions = self.data.get("predictions")

        if polls is not None:
            polls_figure = self.charts.create_scatter_figure(
                polls, handler.scatter_controller(polls, None)
            )
        else:
            polls_figure = self.charts.create_blank_figure()

        if predictions is not None:
            predictions_figure = self.charts.create_line_figure(
                predictions, handler.line_controller(predictions, None)
            )
        else:
            predictions_figure = self.charts.create_blank_figure()

        return {"polls": polls_figure, "predictions": predictions_figure}

    def generate_dashboard(self) -> Any:
        """
        生成 Dash 應用界面並註冊回調

        Returns:
            Any: Dash 應用實例
        """
        try:
            if self.data is None:
                self.load_data()

            self.logger.info("開始生成 Dash 界面")
            self.app = self.dashboard_generator.create_app(
                self.initial_figures(),
                url_base_pathname=self.config.server.get("url_base_pathname"),
            )
            self.callback_handler.setup_callbacks(self.app, self.data)
            self.logger.info("Dash 界面生成完成")
            return self.app
        except Exception as e:
            self.logger.error(f"Dash 界面生成失敗: {e}")
            raise

    def run(self, host: Optional[str] = None, port: Optional[int] = None, debug: Optional[bool] = None):
        """
        運行可視化平台

        Args:
            host: 主機地址，預設取自配置
            port: 端口號，預設取自配置
            debug: 是否開啟調試模式，預設取自配置
        """
        server_cfg = self.config.server
        host = host or server_cfg["host"]
        port = port or server_cfg["port"]
        debug = server_cfg["debug"] if debug is None else debug

        if self.app is None:
            self.generate_dashboard()

        base_path = server_cfg.get("url_base_pathname") or "/"
        url = f"http://{host}:{port}{base_path}"
        self.logger.info(f"啟動可視化平台於 {url}")
        show_success("PLOTTER", f"可視化平台已啟動\n請在瀏覽器中開啟: {url}\n按 Ctrl+C 停止服務")

        self.app.run(host=host, port=port, debug=debug)

    def get_data_summary(self) -> Dict[str, Any]:
        """
        獲取數據摘要信息

        Returns:
            Dict[str, Any]: 各來源筆數與日期範圍
        """
        if self.data is None:
            self.load_data()

        summary: Dict[str, Any] = {}
        polls = self.data.get("polls")
        if polls:
            dates = [r.field_date for r in polls]
            summary["polls"] = {
                "count": len(polls),
                "pollsters": sorted({r.pollster_id for r in polls}),
                "start": min(dates).isoformat(),
                "end": max(dates).isoformat(),
            }
        else:
            summary["polls"] = {"count": 0}

        predictions = self.data.get("predictions")
        if predictions:
            summary["predictions"] = {
                "count": len(predictions),
                "start": predictions[0].date.isoformat(),
                "end": predictions[-1].date.isoformat(),
            }
        else:
            summary["predictions"] = {"count": 0}
        return summary
