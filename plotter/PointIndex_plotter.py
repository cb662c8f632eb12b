"""
PointIndex_plotter.py

【功能說明】
------------------------------------------------------------
以游標的水平像素位置查找紀錄：像素 → TimeScale.invert → 日期 →
對已排序的日期序列做左側二分搜尋（bisect_left），回傳插入點上的紀錄。

【行為說明】
------------------------------------------------------------
- 回傳插入點的紀錄，即「右側鄰居」，不與左側鄰居比較距離
- 游標在第一筆之前：索引 0（floor 預設為 0）
- 游標在最後一筆之後：插入點等於序列長度，lookup 會夾到 len - 1
- 每次查詢 O(log n)，日期在建構時一次取出

```mermaid
flowchart LR
    A[x 像素] -->|invert| B[日期]
    B -->|bisect_left| C[插入點]
    C -->|clamp| D[紀錄]
```
"""

from bisect import bisect_left
from datetime import datetime
from typing import Callable, Generic, List, Sequence, Tuple, TypeVar

from .ScaleMapper_plotter import TimeScale, to_datetime

T = TypeVar("T")


class PointIndex(Generic[T]):
    def __init__(
        self,
        records: Sequence[T],
        x_scale: TimeScale,
        key: Callable[[T], object] = lambda r: r.date,
        floor: int = 0,
    ):
        self.records = records
        self.x_scale = x_scale
        self.floor = floor
        self._keys: List[datetime] = [to_datetime(key(r)) for r in records]

    def __len__(self) -> int:
        return len(self.records)

    def bisect(self, x_px: float) -> int:
        """插入點，可能等於 len(records)（未夾限）"""
        target = self.x_scale.invert(x_px)
        lo = min(self.floor, len(self._keys))
        return bisect_left(self._keys, target, lo)

    def lookup(self, x_px: float) -> Tuple[int, T]:
        if not self.records:
            raise LookupError("PointIndex 沒有任何紀錄")
        index = min(self.bisect(x_px), len(self.records) - 1)
        return index, self.records[index]
