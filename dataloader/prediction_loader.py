"""
prediction_loader.py

【功能說明】
------------------------------------------------------------
模型預測載入器，讀取 predictions_popularity.csv，將每列轉為 PredictionRecord。
外層區間可以是 hdi_90_* 或 hdi_95_*（兩者皆有時取 90%）。

【常見易錯點】
------------------------------------------------------------
- PointIndex 以二分搜尋查找日期，紀錄必須依日期遞增；
  來源若未排序，這裡會穩定排序並發出警告
- 每列都檢查 low ≤ mean ≤ high，違反時拋出 ParseError
"""

from typing import Any, Dict, List

import pandas as pd

from dataloader.base_loader import AbstractDataLoader
from dataloader.records_loader import PredictionRecord
from dataloader.validator_loader import (
    ParseError,
    check_intervals,
    coerce_dates,
    coerce_percentages,
    require_columns,
)

PREDICTION_COLUMNS = ["date", "mean", "hdi_50_left", "hdi_50_right"]
OUTER_LEVELS = (90, 95)


def detect_outer_level(columns: Any) -> int:
    """回傳來源所含的外層 HDI 等級（90 或 95）"""
    present = set(columns)
    for level in OUTER_LEVELS:
        if {f"hdi_{level}_left", f"hdi_{level}_right"} <= present:
            return level
    raise ParseError("缺少外層區間欄位 hdi_90_left/right 或 hdi_95_left/right")


class PredictionLoader(AbstractDataLoader):
    step_name = "載入模型預測"

    def parse(self, data: pd.DataFrame) -> List[PredictionRecord]:
        require_columns(data.columns, PREDICTION_COLUMNS)
        level = detect_outer_level(data.columns)
        left, right = f"hdi_{level}_left", f"hdi_{level}_right"

        dates = coerce_dates(data, "date")
        mean = coerce_percentages(data, "mean")
        hdi50_low = coerce_percentages(data, "hdi_50_left")
        hdi50_high = coerce_percentages(data, "hdi_50_right")
        outer_low = coerce_percentages(data, left)
        outer_high = coerce_percentages(data, right)
        check_intervals(hdi50_low, mean, hdi50_high, "HDI 50%")
        check_intervals(outer_low, mean, outer_high, f"HDI {level}%")

        records = [
            PredictionRecord(
                date=d,
                mean_pct=float(m),
                hdi50_low=float(l50),
                hdi50_high=float(h50),
                hdi_outer_low=float(lo),
                hdi_outer_high=float(hi),
                hdi_outer_level=level,
            )
            for d, m, l50, h50, lo, hi in zip(
                dates, mean, hdi50_low, hdi50_high, outer_low, outer_high
            )
        ]
        return self._ensure_sorted(records)

    def _ensure_sorted(self, records: List[PredictionRecord]) -> List[PredictionRecord]:
        in_order = all(a.date <= b.date for a, b in zip(records, records[1:]))
        if in_order:
            return records
        self.logger.warning(f"預測數據未依日期排序，已重新排序: {self.source}")
        self.show_warning("預測數據未依日期排序，已依日期重新排序")
        return sorted(records, key=lambda r: r.date)

    def summarize(self, records: List[PredictionRecord]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"筆數": len(records)}
        if records:
            summary["外層區間"] = f"HDI {records[0].hdi_outer_level}%"
            summary["時間範圍"] = f"{records[0].date:%Y-%m-%d} 至 {records[-1].date:%Y-%m-%d}"
            summary["最新平均"] = round(records[-1].mean_pct, 1)
        return summary
