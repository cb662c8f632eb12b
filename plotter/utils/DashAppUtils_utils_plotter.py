"""
Dash 應用工具模組

統一處理 Dash 應用的創建邏輯。
"""

import logging
from typing import Optional

import dash
import dash_bootstrap_components as dbc


def normalize_base_path(url_base_pathname: Optional[str]) -> Optional[str]:
    """確保路徑前綴以 / 開頭和結尾；空值回傳 None"""
    if not url_base_pathname:
        return None
    if not url_base_pathname.startswith("/"):
        url_base_pathname = "/" + url_base_pathname
    if not url_base_pathname.endswith("/"):
        url_base_pathname = url_base_pathname + "/"
    return url_base_pathname


def create_dash_app(
    layout: dash.html.Div,
    app_title: str = "Popularity Dashboard",
    url_base_pathname: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> dash.Dash:
    """
    創建 Dash 應用實例

    Args:
        layout: Dash 布局組件
        app_title: 應用標題
        url_base_pathname: URL 路徑前綴（例如 "/popularity/"），預設為 None（使用根路徑）
        logger: 日誌記錄器，預設為 None

    Returns:
        dash.Dash: Dash 應用實例
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        logger.info(f"開始創建 Dash 應用: {app_title}")

        dash_kwargs = {
            "name": __name__,
            "external_stylesheets": [dbc.themes.BOOTSTRAP],
            "suppress_callback_exceptions": True,
        }

        base_path = normalize_base_path(url_base_pathname)
        if base_path:
            dash_kwargs["url_base_pathname"] = base_path
            logger.info(f"設置 URL 路徑前綴: {base_path}")

        app = dash.Dash(**dash_kwargs)
        app.title = app_title
        app.layout = layout

        logger.info(f"Dash 應用創建完成: {app_title}")
        return app
    except Exception as e:
        logger.error(f"創建 Dash 應用失敗: {e}")
        raise
