"""
main.py

【功能說明】
------------------------------------------------------------
本檔案為民調支持度可視化平台的主入口，負責初始化日誌、載入配置、
解析命令列參數，並啟動 BasePlotter（或只檢查數據來源）。

【流程與數據流】
------------------------------------------------------------
```mermaid
flowchart TD
    A[main.py] -->|setup_logging| B[logs/popularity.log]
    A -->|ConfigLoader| C[DashboardConfig]
    C -->|--check| D[BasePlotter.load_data 預覽]
    C -->|預設| E[BasePlotter.run]
```

【錯誤處理】
------------------------------------------------------------
- 配置檔錯誤時顯示錯誤 Panel 並以狀態碼 1 結束
- --check 模式下任一來源載入失敗時以狀態碼 1 結束

【範例】
------------------------------------------------------------
- 啟動可視化平台：python main.py
- 指定配置：python main.py --config config.json --port 8080
- 本地檔案：python main.py --polls-url records/polls.csv --predictions-url records/predictions.csv
- 只檢查數據：python main.py --check
"""

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from utils import (
    ConfigError,
    ConfigLoader,
    show_error,
    show_summary,
    show_welcome,
)

# 可視化平台配置（配置檔與命令列參數可覆蓋）
PLOTTER_HOST = "127.0.0.1"
PLOTTER_PORT = 8050
PLOTTER_BASE_PATH = None  # 例如 "/popularity/"
PLOTTER_DEBUG = False

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"


def setup_logging(log_dir: Optional[str] = None) -> logging.Logger:
    """
    設置 RotatingFileHandler，所有 popularity.* 日誌寫入 logs/popularity.log
    """
    log_dir = log_dir or os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "popularity.log")

    # 關閉HTTP請求日誌，讓控制台更簡潔
    logging.getLogger("werkzeug").setLevel(logging.ERROR)
    logging.getLogger("dash").setLevel(logging.ERROR)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    handler = RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger("popularity")
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers = []
    root_logger.addHandler(handler)
    root_logger.info("=== 程式啟動 ===")
    return root_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Presidential approval dashboard")
    parser.add_argument("--config", help="JSON 配置檔路徑")
    parser.add_argument("--host", help=f"主機地址（預設 {PLOTTER_HOST}）")
    parser.add_argument("--port", type=int, help=f"端口號（預設 {PLOTTER_PORT}）")
    parser.add_argument("--debug", action="store_true", help="開啟 Dash 調試模式")
    parser.add_argument("--polls-url", help="民調 CSV 網址或本地路徑")
    parser.add_argument("--predictions-url", help="模型預測 CSV 網址或本地路徑")
    parser.add_argument(
        "--check", action="store_true", help="只載入並驗證數據來源，不啟動服務"
    )
    return parser


def load_runtime_config(args: argparse.Namespace, logger: logging.Logger):
    """配置優先序：命令列 > 配置檔 > main.py 常量 > DEFAULT_CONFIG"""
    config = ConfigLoader(logger.getChild("config")).load_config(args.config)

    server = config.server
    if not args.config:
        server.update(
            host=PLOTTER_HOST,
            port=PLOTTER_PORT,
            debug=PLOTTER_DEBUG,
            url_base_pathname=PLOTTER_BASE_PATH,
        )
    if args.host:
        server["host"] = args.host
    if args.port:
        server["port"] = args.port
    if args.debug:
        server["debug"] = True
    if args.polls_url:
        config.dataloader["polls_source"] = args.polls_url
    if args.predictions_url:
        config.dataloader["predictions_source"] = args.predictions_url
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging()

    show_welcome(
        "popularity",
        "[bold #81A1C1]📈 Presidential approval dashboard[/bold #81A1C1]\n"
        "[white]Polls scatter + model line with HDI bands[/white]",
    )

    try:
        config = load_runtime_config(args, logger)
    except ConfigError as e:
        logger.error(f"配置載入失敗: {e}")
        show_error("CONFIG", str(e), "請確認配置檔路徑與 JSON 格式")
        return 1

    show_summary("CONFIG", "載入配置", config.get_summary())

    from plotter.Base_plotter import BasePlotter

    plotter = BasePlotter(config, logger=logger.getChild("plotter"))

    if args.check:
        data = plotter.load_data(preview=True)
        failed = [name for name, records in data.items() if records is None]
        summary = plotter.get_data_summary()
        items = {}
        for name, label in (("polls", "民調"), ("predictions", "預測")):
            feed = summary[name]
            items[f"{label}筆數"] = feed["count"]
            if feed["count"]:
                items[f"{label}時間範圍"] = f"{feed['start']} 至 {feed['end']}"
        items["失敗來源"] = ", ".join(failed) or "無"
        show_summary("PLOTTER", "檢查數據來源", items)
        return 1 if failed else 0

    plotter.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
