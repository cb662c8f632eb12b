"""
config_utils.py

【功能說明】
------------------------------------------------------------
配置載入模組。預設配置以 DEFAULT_CONFIG 常量保存，可選的 JSON 配置檔
會以分區（dataloader / plotter / server）為單位合併到預設值之上，
命令列參數再覆蓋兩者。

【常見易錯點】
------------------------------------------------------------
- JSON 內的日期必須為 YYYY-MM-DD 字串
- 分區合併僅到第二層，margin 等巢狀字典會整個被取代

【範例】
------------------------------------------------------------
- config = ConfigLoader().load_config("config.json")
- config.dataloader["polls_source"]
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

POLLS_FEED_URL = (
    "https://raw.githubusercontent.com/AlexAndorra/pollsposition_dashboards/"
    "main/exports/polls_popularity.csv"
)
PREDICTIONS_FEED_URL = (
    "https://raw.githubusercontent.com/AlexAndorra/pollsposition_dashboards/"
    "main/exports/predictions_popularity.csv"
)

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "dataloader": {
        "polls_source": POLLS_FEED_URL,
        "predictions_source": PREDICTIONS_FEED_URL,
        "timeout": 10.0,
    },
    "plotter": {
        "width": 800,
        "height": 500,
        "margin": {"top": 10, "right": 30, "bottom": 30, "left": 60},
        "x_domain": ["2017-05-01", "2022-05-01"],
        "y_domain": [0, 100],
        "tooltip_offset": [90, 0],
        "transition_ms": 200,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8050,
        "debug": False,
        "url_base_pathname": None,
    },
}


class ConfigError(Exception):
    """配置檔不存在、格式錯誤或內容不合法"""


class DashboardConfig:
    """
    配置數據容器

    封裝合併後的配置，提供各分區的標準化訪問介面。
    """

    def __init__(self, config_dict: Dict[str, Any], file_path: Optional[str] = None):
        self.file_path = file_path
        self.file_name = Path(file_path).name if file_path else None
        self.raw_config = copy.deepcopy(config_dict)

        self.dataloader = self.raw_config.get("dataloader", {})
        self.plotter = self.raw_config.get("plotter", {})
        self.server = self.raw_config.get("server", {})

    @property
    def plot_width(self) -> int:
        """繪圖區寬度（扣除左右邊距）"""
        margin = self.plotter["margin"]
        return int(self.plotter["width"]) - margin["left"] - margin["right"]

    @property
    def plot_height(self) -> int:
        """繪圖區高度（扣除上下邊距）"""
        margin = self.plotter["margin"]
        return int(self.plotter["height"]) - margin["top"] - margin["bottom"]

    def get_summary(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name or "(預設配置)",
            "polls_source": self.dataloader.get("polls_source"),
            "predictions_source": self.dataloader.get("predictions_source"),
            "server": f"{self.server.get('host')}:{self.server.get('port')}",
        }


class ConfigLoader:
    """
    配置文件載入器

    負責從 JSON 文件中載入配置，與 DEFAULT_CONFIG 合併並檢查必要欄位。
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("popularity.config")
        self.default_config = DEFAULT_CONFIG

    def load_config(self, config_file: Optional[str] = None) -> DashboardConfig:
        """
        載入配置；未提供檔案時直接回傳預設配置

        Raises:
            ConfigError: 檔案不存在、JSON 格式錯誤或欄位不合法
        """
        if config_file is None:
            return DashboardConfig(self._merge_with_defaults({}))

        config_dict = self._read_config_file(config_file)
        merged_config = self._merge_with_defaults(config_dict)
        self._validate(merged_config, config_file)
        self.logger.info(f"配置載入完成: {config_file}")
        return DashboardConfig(merged_config, config_file)

    def _read_config_file(self, config_file: str) -> Dict[str, Any]:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"配置文件不存在: {config_file}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"JSON 格式錯誤 ({Path(config_file).name}): {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigError(f"配置文件頂層必須為物件: {Path(config_file).name}")
        return config_dict

    def _merge_with_defaults(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """以分區為單位合併預設配置"""
        merged_config = copy.deepcopy(self.default_config)

        for key, value in config_dict.items():
            if (
                key in merged_config
                and isinstance(merged_config[key], dict)
                and isinstance(value, dict)
            ):
                merged_config[key] = {**merged_config[key], **value}
            else:
                merged_config[key] = value

        return merged_config

    def _validate(self, config: Dict[str, Any], config_file: str) -> None:
        name = Path(config_file).name
        port = config["server"].get("port")
        if not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigError(f"server.port 不合法 ({name}): {port}")

        plotter = config["plotter"]
        for key in ("x_domain", "y_domain", "tooltip_offset"):
            value = plotter.get(key)
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise ConfigError(f"plotter.{key} 必須為長度 2 的陣列 ({name})")

        if float(config["dataloader"].get("timeout", 0)) <= 0:
            raise ConfigError(f"dataloader.timeout 必須大於 0 ({name})")
