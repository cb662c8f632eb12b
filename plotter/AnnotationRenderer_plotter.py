"""
AnnotationRenderer_plotter.py

【功能說明】
------------------------------------------------------------
無狀態的文字格式化：給定選中的紀錄，產生散點提示框文字、
預測線的大標題百分比，以及日期標籤。

【lagged display month】
------------------------------------------------------------
預測線的日期標籤顯示「選中日期的前一個月」，例如 2021-06-15 顯示 May 2021。
這是既有頁面的顯示慣例，保持不變。

【常見易錯點】
------------------------------------------------------------
- 百分比欄位已是 0~100，不要再乘 100
- 月份名稱固定為英文，不隨系統 locale 改變
"""

from datetime import date
from typing import List

from dataloader.records_loader import PollRecord, PredictionRecord

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_pct(value: float) -> str:
    """百分比取一位小數"""
    return f"{value:.1f}"


def format_short_date(d: date) -> str:
    return f"{d.day:02d} {MONTH_NAMES[d.month - 1][:3]} {d.year}"


def format_poll_tooltip(record: PollRecord) -> List[str]:
    """散點提示框，每個元素一行"""
    return [
        f"Pollster: {record.pollster_id}",
        f"Method: {record.method}",
        f"Approve: {format_pct(record.approve_pct)}%",
        f"Disapprove: {format_pct(record.disapprove_pct)}%",
        f"Sample: {record.sample_size}",
        f"Field date: {format_short_date(record.field_date)}",
    ]


def format_headline(record: PredictionRecord) -> str:
    return f"{format_pct(record.mean_pct)}% approve"


def lagged_display_month(d: date) -> str:
    """選中日期前一個月的「月份 年份」標籤"""
    year, month = (d.year - 1, 12) if d.month == 1 else (d.year, d.month - 1)
    return f"{MONTH_NAMES[month - 1]} {year}"
