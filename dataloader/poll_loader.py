"""
poll_loader.py

【功能說明】
------------------------------------------------------------
民調數據載入器，讀取 polls_popularity.csv，將每列轉為 PollRecord。
保留來源順序（大致依時間排列，但不保證排序），散點圖不需要排序。

【欄位對應】
------------------------------------------------------------
| CSV 欄位      | PollRecord      | 轉換             |
|---------------|-----------------|------------------|
| field_date    | field_date      | YYYY-MM-DD       |
| sondage       | pollster_id     | 原字串           |
| method        | method          | 原字串           |
| p_approve     | approve_pct     | 比例 × 100       |
| p_disapprove  | disapprove_pct  | 比例 × 100       |
| samplesize    | sample_size     | 非負整數         |
"""

from typing import Any, Dict, List

import pandas as pd

from dataloader.base_loader import AbstractDataLoader
from dataloader.records_loader import PollRecord
from dataloader.validator_loader import (
    coerce_counts,
    coerce_dates,
    coerce_percentages,
    coerce_text,
    require_columns,
)

POLL_COLUMNS = ["field_date", "sondage", "method", "p_approve", "p_disapprove", "samplesize"]


class PollLoader(AbstractDataLoader):
    step_name = "載入民調數據"

    def parse(self, data: pd.DataFrame) -> List[PollRecord]:
        require_columns(data.columns, POLL_COLUMNS)

        columns = zip(
            coerce_dates(data, "field_date"),
            coerce_text(data, "sondage"),
            coerce_text(data, "method"),
            coerce_percentages(data, "p_approve"),
            coerce_percentages(data, "p_disapprove"),
            coerce_counts(data, "samplesize"),
        )
        return [
            PollRecord(
                field_date=field_date,
                pollster_id=pollster,
                method=method,
                approve_pct=float(approve),
                disapprove_pct=float(disapprove),
                sample_size=int(sample),
            )
            for field_date, pollster, method, approve, disapprove, sample in columns
        ]

    def summarize(self, records: List[PollRecord]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"筆數": len(records)}
        if records:
            dates = [r.field_date for r in records]
            summary["機構數"] = len({r.pollster_id for r in records})
            summary["時間範圍"] = f"{min(dates):%Y-%m-%d} 至 {max(dates):%Y-%m-%d}"
        return summary
