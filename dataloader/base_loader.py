"""
base_loader.py

【功能說明】
------------------------------------------------------------
本模組為數據載入模組的抽象基底類，統一規範民調與模型預測兩種 CSV 來源的
讀取、解析、回報流程。來源可以是網址（以 requests 下載）或本地檔案路徑。

【流程與數據流】
------------------------------------------------------------
- 子類只需實作 parse()，把 DataFrame 轉為型別化紀錄
- load() 負責：讀取來源 → parse → 記錄日誌 → 顯示摘要

```mermaid
flowchart TD
    A[base_loader] -->|繼承| B[PollLoader/PredictionLoader]
    B -->|read_source| C[DataFrame（全部欄位為字串）]
    C -->|parse| D[PollRecord/PredictionRecord 列表]
    D -->|提供| E[BasePlotter]
```

【錯誤處理】
------------------------------------------------------------
- 網路錯誤、HTTP 錯誤狀態、檔案不存在：FeedUnavailableError
- 欄位缺失、非數值、日期錯誤：ParseError
- 不重試，錯誤向上拋出由 BasePlotter 決定該圖表留白

【範例】
------------------------------------------------------------
- records = PollLoader("records/polls_popularity.csv").load()
- records = PredictionLoader(url, timeout=5).load()
"""

import io
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from dataloader.validator_loader import FeedUnavailableError, print_dataframe_table
from utils import (
    get_console,
    show_error,
    show_info,
    show_success,
    show_summary,
    show_warning,
)


class AbstractDataLoader(ABC):
    """Abstract base class for CSV feed loaders with common functionality"""

    #: 子類顯示於摘要面板的步驟名稱
    step_name = "載入數據"

    def __init__(
        self,
        source: str,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.source = source
        self.timeout = timeout
        self.logger = logger or logging.getLogger(f"popularity.dataloader.{type(self).__name__}")
        self.session = session
        self.console = get_console()

    def show_error(self, message: str) -> None:
        """Display error message in standardised panel"""
        show_error("DATALOADER", message)

    def show_success(self, message: str) -> None:
        """Display success message in standardised panel"""
        show_success("DATALOADER", message)

    def show_warning(self, message: str) -> None:
        """Display warning message in standardised panel"""
        show_warning("DATALOADER", message)

    def show_info(self, message: str) -> None:
        """Display informational message in standardised panel"""
        show_info("DATALOADER", message)

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def read_source(self) -> pd.DataFrame:
        """Read the CSV source into a DataFrame of raw strings

        Every column is kept as text (dtype=str, no NA inference) so that the
        validating parse step sees exactly what the feed contains.
        """
        if self.is_remote:
            text = self._fetch_remote()
            buffer = io.StringIO(text)
            return pd.read_csv(buffer, dtype=str, keep_default_na=False)

        if not os.path.exists(self.source):
            raise FeedUnavailableError(f"找不到文件 '{self.source}'")
        try:
            return pd.read_csv(self.source, dtype=str, keep_default_na=False)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise FeedUnavailableError(f"讀取文件 '{self.source}' 失敗：{e}") from e

    def _fetch_remote(self) -> str:
        getter = self.session.get if self.session is not None else requests.get
        self.logger.info(f"下載 CSV: {self.source}")
        try:
            response = getter(self.source, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedUnavailableError(f"下載 '{self.source}' 失敗：{e}") from e
        return response.text

    @abstractmethod
    def parse(self, data: pd.DataFrame) -> List[Any]:
        """Convert raw rows into typed records, raising ParseError on bad rows"""

    def summarize(self, records: List[Any]) -> Dict[str, Any]:
        return {"筆數": len(records)}

    def load(self, preview: bool = False) -> List[Any]:
        """Read and parse the source; returns typed records in source order"""
        data = self.read_source()
        if preview and not data.empty:
            print_dataframe_table(data.head(), title=f"{self.step_name}，預覽（前5行）")

        records = self.parse(data)
        self.logger.info(f"{self.step_name}完成，共 {len(records)} 筆: {self.source}")
        if preview:
            show_summary("DATALOADER", self.step_name, self.summarize(records))
        return records
