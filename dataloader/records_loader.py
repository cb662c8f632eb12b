"""
records_loader.py

【功能說明】
------------------------------------------------------------
定義兩個圖表所使用的型別化紀錄：民調數據點 PollRecord 與模型預測 PredictionRecord。
兩者皆為不可變的 dataclass，由各自的載入器一次建立，之後只讀不寫。

【常見易錯點】
------------------------------------------------------------
- 百分比欄位已乘以 100 保存，格式化時勿重複換算
- PredictionRecord 的 hdi_outer_* 可能是 90% 或 95% 區間，需看 hdi_outer_level
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class PollRecord:
    """單筆民調（一個散點）"""

    field_date: date
    pollster_id: str
    method: str
    approve_pct: float
    disapprove_pct: float
    sample_size: int


@dataclass(frozen=True)
class PredictionRecord:
    """單日模型預測：平均支持度與兩層 HDI 區間"""

    date: date
    mean_pct: float
    hdi50_low: float
    hdi50_high: float
    hdi_outer_low: float
    hdi_outer_high: float
    hdi_outer_level: int = 90
