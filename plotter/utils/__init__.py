"""
plotter 工具模組
"""

from .DashAppUtils_utils_plotter import create_dash_app, normalize_base_path

__all__ = ["create_dash_app", "normalize_base_path"]
