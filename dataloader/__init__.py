"""
dataloader 目錄

【功能說明】
------------------------------------------------------------
本目錄負責讀取兩個 CSV 來源（民調、模型預測）並轉換為型別化紀錄。

```mermaid
flowchart TD
    A[BasePlotter/main.py] -->|from dataloader import ...| B[PollLoader/PredictionLoader]
    B -->|驗證| C[validator_loader]
    B -->|紀錄| D[PollRecord/PredictionRecord]
```

【常見易錯點】
------------------------------------------------------------
- 忘記將新模組加入 __all__，導致外部無法正確匯入
"""

from .base_loader import AbstractDataLoader
from .poll_loader import PollLoader
from .prediction_loader import PredictionLoader
from .records_loader import PollRecord, PredictionRecord
from .validator_loader import DataLoaderError, FeedUnavailableError, ParseError

__all__ = [
    "AbstractDataLoader",
    "PollLoader",
    "PredictionLoader",
    "PollRecord",
    "PredictionRecord",
    "DataLoaderError",
    "FeedUnavailableError",
    "ParseError",
]
