"""
validator_loader.py

【功能說明】
------------------------------------------------------------
本模組為數據驗證模組，負責以 pandas 整欄轉換 CSV 欄位為型別化數值，
任何缺失、非數值、日期格式錯誤或超出範圍的欄位都會拋出 ParseError，
不會產生 NaN 流入下游座標計算。

【流程與數據流】
------------------------------------------------------------
```mermaid
flowchart TD
    A[PollLoader/PredictionLoader] -->|逐欄調用| B(validator_loader)
    B -->|型別化數值| C[PollRecord/PredictionRecord]
    B -->|失敗| D[ParseError]
```

【常見易錯點】
------------------------------------------------------------
- CSV 以字串讀入（dtype=str），空字串代表缺失
- 百分比欄位在來源中是 0~1 的比例，轉換後為 0~100
- 錯誤回報第一個不合法的列，行號含標頭（數據從第 2 行開始）

【範例】
------------------------------------------------------------
- coerce_percentages(data, "p_approve")  # "0.4123" -> 41.23
- coerce_dates(data, "field_date")  # "2021-06-15" -> date(2021, 6, 15)
"""

from typing import Iterable, Optional

import pandas as pd
from rich.table import Table

from utils import get_console

console = get_console()


class DataLoaderError(Exception):
    """數據載入相關錯誤的基底類"""


class ParseError(DataLoaderError, ValueError):
    """CSV 欄位缺失、非數值或違反不變量"""

    def __init__(self, message: str, row: Optional[int] = None, column: Optional[str] = None):
        self.row = row
        self.column = column
        location = []
        if row is not None:
            location.append(f"第 {row} 行")
        if column is not None:
            location.append(f"欄位 '{column}'")
        prefix = "，".join(location)
        super().__init__(f"{prefix}：{message}" if prefix else message)


class FeedUnavailableError(DataLoaderError):
    """數據來源無法取得（網路或檔案錯誤）"""


def print_dataframe_table(df: pd.DataFrame, title: Optional[str] = None) -> None:
    table = Table(title=title, show_lines=True, border_style="#81A1C1")
    for col in df.columns:
        table.add_column(str(col), style="bold white")
    for _, row in df.iterrows():
        table.add_row(
            *[
                (
                    f"[#88C0D0]{v}[/#88C0D0]"
                    if isinstance(v, (int, float, complex)) and not isinstance(v, bool)
                    else str(v)
                )
                for v in row
            ]
        )
    console.print(table)


def require_columns(columns: Iterable[str], required: Iterable[str]) -> None:
    """確認 CSV 標頭包含所有必要欄位"""
    present = set(columns)
    missing = [col for col in required if col not in present]
    if missing:
        raise ParseError(f"缺少必要欄位 {missing}")


def _line_number(position: int) -> int:
    # 第 1 行為標頭，數據從第 2 行開始
    return position + 2


def _raise_first(mask: pd.Series, raw: pd.Series, column: str, message: str) -> None:
    """mask 中第一個 True 的位置拋出 ParseError"""
    if not mask.any():
        return
    position = int(mask.to_numpy().argmax())
    text = raw.iloc[position]
    if text == "":
        raise ParseError("欄位為空", _line_number(position), column)
    raise ParseError(message.format(value=text), _line_number(position), column)


def _raw_column(data: pd.DataFrame, column: str) -> pd.Series:
    return data[column].astype(str).str.strip()


def coerce_text(data: pd.DataFrame, column: str) -> pd.Series:
    raw = _raw_column(data, column)
    _raise_first(raw.eq(""), raw, column, "欄位為空")
    return raw


def coerce_dates(data: pd.DataFrame, column: str) -> pd.Series:
    """整欄解析 YYYY-MM-DD 日期，回傳 datetime.date"""
    raw = _raw_column(data, column)
    parsed = pd.to_datetime(raw, format="%Y-%m-%d", errors="coerce")
    _raise_first(parsed.isna(), raw, column, "日期格式錯誤 '{value}'（需為 YYYY-MM-DD）")
    return parsed.dt.date


def coerce_numbers(data: pd.DataFrame, column: str) -> pd.Series:
    raw = _raw_column(data, column)
    numbers = pd.to_numeric(raw, errors="coerce").astype(float)
    _raise_first(numbers.isna(), raw, column, "非數值 '{value}'")
    _raise_first(numbers.abs().eq(float("inf")), raw, column, "非有限數值 '{value}'")
    return numbers


def coerce_percentages(data: pd.DataFrame, column: str) -> pd.Series:
    """將 0~1 的比例轉為 0~100 的百分比"""
    raw = _raw_column(data, column)
    pct = 100 * coerce_numbers(data, column)
    _raise_first(~pct.between(0, 100), raw, column, "百分比超出 [0, 100]：{value}")
    return pct


def coerce_counts(data: pd.DataFrame, column: str) -> pd.Series:
    """樣本數：允許 '1002' 或 '1002.0'，不允許小數或負數"""
    raw = _raw_column(data, column)
    numbers = coerce_numbers(data, column)
    _raise_first(numbers.lt(0) | numbers.mod(1).ne(0), raw, column, "樣本數必須為非負整數：{value}")
    return numbers.astype(int)


def check_intervals(low: pd.Series, mean: pd.Series, high: pd.Series, label: str) -> None:
    """確認每列 low ≤ mean ≤ high"""
    broken = ~(low.le(mean) & mean.le(high))
    if not broken.any():
        return
    position = int(broken.to_numpy().argmax())
    raise ParseError(
        f"{label} 區間不成立：low={low.iloc[position]:.3f}, "
        f"mean={mean.iloc[position]:.3f}, high={high.iloc[position]:.3f}",
        _line_number(position),
    )
