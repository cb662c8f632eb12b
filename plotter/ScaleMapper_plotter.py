"""
ScaleMapper_plotter.py

【功能說明】
------------------------------------------------------------
時間與線性比例尺：將數據域（日期、百分比）映射到繪圖區像素座標，並提供反向映射。
比例尺不持有狀態，給定 domain/range 即可重複使用。

【與其他模組的關聯】
------------------------------------------------------------
- PointIndex 以 TimeScale.invert 將游標像素轉回日期
- ChartComponents / InteractionController 以比例尺計算註解位置
"""

from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

DateLike = Union[date, datetime, str]

# 固定顯示窗口，與數據實際範圍無關
X_DOMAIN = ("2017-05-01", "2022-05-01")
Y_DOMAIN = (0.0, 100.0)


def to_datetime(value: DateLike) -> datetime:
    """date / 'YYYY-MM-DD' / datetime 一律轉為 datetime"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.strptime(value, "%Y-%m-%d")


class LinearScale:
    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))
        if self.domain[0] == self.domain[1]:
            raise ValueError("比例尺 domain 兩端不可相同")

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)


class TimeScale:
    """
    時間比例尺

    以秒為單位做線性插值，invert 回傳 datetime（可能落在 domain 之外）。
    """

    def __init__(self, domain: Tuple[DateLike, DateLike], range_: Tuple[float, float]):
        self.domain = (to_datetime(domain[0]), to_datetime(domain[1]))
        self._origin = self.domain[0]
        span = (self.domain[1] - self._origin).total_seconds()
        self._linear = LinearScale((0.0, span), range_)
        self.range = self._linear.range

    def __call__(self, value: DateLike) -> float:
        seconds = (to_datetime(value) - self._origin).total_seconds()
        return self._linear(seconds)

    def invert(self, pixel: float) -> datetime:
        return self._origin + timedelta(seconds=self._linear.invert(pixel))


def build_scales(plot_width: float, plot_height: float, x_domain=X_DOMAIN, y_domain=Y_DOMAIN):
    """建立 (x, y) 比例尺；y 軸像素方向向下，故 range 為 (height, 0)"""
    x = TimeScale((x_domain[0], x_domain[1]), (0, plot_width))
    y = LinearScale((y_domain[0], y_domain[1]), (plot_height, 0))
    return x, y
