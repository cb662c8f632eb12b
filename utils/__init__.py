"""
專案級別的通用工具模組

提供統一的 UI 顯示工具與配置載入，確保所有模組使用一致的 CLI 美化格式。
"""

from .config_utils import DEFAULT_CONFIG, ConfigError, ConfigLoader, DashboardConfig
from .ui_utils import (
    MODULE_EMOJI_MAP,
    css_class_token,
    get_console,
    show_error,
    show_info,
    show_success,
    show_summary,
    show_warning,
    show_welcome,
)

__all__ = [
    "get_console",
    "css_class_token",
    "show_error",
    "show_success",
    "show_warning",
    "show_info",
    "show_summary",
    "show_welcome",
    "MODULE_EMOJI_MAP",
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigLoader",
    "DashboardConfig",
]
