"""
統一 UI 工具模組

提供標準化的 Rich Panel 顯示函數，讓載入器、可視化平台與命令列入口
以一致的格式向終端輸出狀態。

【使用範例】
------------------------------------------------------------
from utils import show_error, show_success, show_summary

# 顯示錯誤訊息
show_error("DATALOADER", "民調數據下載失敗", "請確認網址或改用本地檔案")

# 顯示成功訊息
show_success("PLOTTER", "圖表已生成")

# 顯示摘要
show_summary("DATALOADER", "載入民調數據", {"筆數": 812, "機構數": 9})
"""

import re
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel

# 模組標識的 Emoji 映射表
MODULE_EMOJI_MAP = {
    "DATALOADER": "📊",
    "PLOTTER": "🖼️",
    "CONFIG": "⚙️",
}

# 模組名稱映射（將模組名稱映射到顯示名稱）
MODULE_NAME_MAP = {
    "DATALOADER": "數據載入 Dataloader",
    "PLOTTER": "可視化 Plotter",
    "CONFIG": "配置 Config",
}

# 顏色常量（Nord 色盤，與圖表一致）
COLOR_PRIMARY = "#81A1C1"  # 主色（霧藍）
COLOR_SECONDARY = "#BF616A"  # 副色（警示紅）
COLOR_BLUE = "#88C0D0"  # 數值

# 模組級別的單例 Console 實例
_console_instance: Optional[Console] = None

_CLASS_TOKEN_RE = re.compile(r"[^A-Za-z0-9_-]+")


def get_console() -> Console:
    """
    獲取 Rich Console 實例（單例模式）

    Returns:
        Console: Rich Console 實例
    """
    global _console_instance
    if _console_instance is None:
        _console_instance = Console()
    return _console_instance


def css_class_token(identifier: str) -> str:
    """
    將任意識別字轉為可作為 class / uid 的安全字串

    空白與標點以 "-" 取代；若結果以數字開頭則補上 "p-" 前綴。

    Args:
        identifier: 原始識別字（如民調機構名稱 "Harris Interactive"）

    Returns:
        str: 安全字串（如 "Harris-Interactive"）
    """
    token = _CLASS_TOKEN_RE.sub("-", identifier.strip()).strip("-")
    if not token:
        return "p-unknown"
    if token[0].isdigit():
        token = f"p-{token}"
    return token


def _get_module_title(module: str, use_emoji: bool = True) -> str:
    """
    獲取模組標題

    Args:
        module: 模組標識（如 "DATALOADER"）
        use_emoji: 是否使用 emoji

    Returns:
        str: 模組標題
    """
    emoji = MODULE_EMOJI_MAP.get(module.upper(), "")
    name = MODULE_NAME_MAP.get(module.upper(), module)

    if use_emoji and emoji:
        return f"[bold {COLOR_SECONDARY}]{emoji} {name}[/bold {COLOR_SECONDARY}]"
    else:
        return f"[bold {COLOR_SECONDARY}]{name}[/bold {COLOR_SECONDARY}]"


def show_error(module: str, message: str, suggestion: Optional[str] = None) -> None:
    """
    顯示錯誤訊息 Panel

    Args:
        module: 模組標識（如 "DATALOADER"）
        message: 錯誤訊息
        suggestion: 可選的建議解決方法
    """
    console = get_console()
    title = _get_module_title(module)

    content = f"❌ {message}"
    if suggestion:
        content += f"\n\n[bold {COLOR_PRIMARY}]建議：[/bold {COLOR_PRIMARY}]\n{suggestion}"

    console.print(
        Panel(
            content,
            title=title,
            border_style=COLOR_SECONDARY,
        )
    )


def show_success(module: str, message: str) -> None:
    """顯示成功訊息 Panel"""
    console = get_console()
    console.print(
        Panel(
            message,
            title=_get_module_title(module),
            border_style=COLOR_PRIMARY,
        )
    )


def show_warning(module: str, message: str) -> None:
    """顯示警告訊息 Panel"""
    console = get_console()
    console.print(
        Panel(
            f"⚠️ {message}",
            title=_get_module_title(module),
            border_style=COLOR_SECONDARY,
        )
    )


def show_info(module: str, message: str) -> None:
    """顯示資訊訊息 Panel"""
    console = get_console()
    console.print(
        Panel(
            message,
            title=_get_module_title(module),
            border_style=COLOR_PRIMARY,
        )
    )


def show_summary(
    module: str,
    step_name: str,
    summary_items: Dict[str, Any],
) -> None:
    """
    顯示小結 Panel

    Args:
        module: 模組標識
        step_name: 步驟名稱
        summary_items: 摘要項目的字典（key-value 對）

    範例:
        show_summary(
            "DATALOADER",
            "載入模型預測",
            {"筆數": 1826, "區間": "HDI 90%"}
        )
    """
    console = get_console()
    emoji = MODULE_EMOJI_MAP.get(module.upper(), "")
    name = MODULE_NAME_MAP.get(module.upper(), module)
    title = f"[bold {COLOR_PRIMARY}]{emoji} {name} 步驟：{step_name} - 完成[/bold {COLOR_PRIMARY}]"

    content_lines = ["✅ 操作完成\n", f"[bold {COLOR_PRIMARY}]結果摘要：[/bold {COLOR_PRIMARY}]"]
    for key, value in summary_items.items():
        # 數值使用藍色
        if isinstance(value, (int, float, complex)) and not isinstance(value, bool):
            value_str = f"[{COLOR_BLUE}]{value}[/{COLOR_BLUE}]"
        else:
            value_str = str(value)
        content_lines.append(f"   • {key}: {value_str}")

    console.print(
        Panel(
            "\n".join(content_lines),
            title=title,
            border_style=COLOR_PRIMARY,
        )
    )


def show_welcome(brand_name: str, content: str) -> None:
    """
    顯示歡迎訊息 Panel

    Args:
        brand_name: 品牌名稱（如 "popularity"）
        content: 歡迎訊息的內容
    """
    console = get_console()

    console.print(
        Panel(
            content,
            title=f"[bold {COLOR_SECONDARY}]{brand_name}[/bold {COLOR_SECONDARY}]",
            border_style=COLOR_PRIMARY,
            padding=(1, 4),
        )
    )
