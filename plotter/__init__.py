"""
plotter 目錄

【功能說明】
------------------------------------------------------------
本目錄為可視化平台核心，以 Dash 呈現民調散點圖與模型預測線，
並以互動控制器處理游標提示、註解與機構選取。

```mermaid
flowchart TD
    A[main.py] -->|調用| B[BasePlotter]
    B -->|載入數據| C[dataloader]
    B -->|生成圖表| D[ChartComponents_plotter]
    B -->|生成界面| E[DashboardGenerator_plotter]
    B -->|處理回調| F[CallbackHandler_plotter]
    F -->|事件| G[InteractionController_plotter]
    G -->|查找| H[PointIndex_plotter]
    G -->|文字| I[AnnotationRenderer_plotter]
    H -->|比例尺| J[ScaleMapper_plotter]
```

【常見易錯點】
------------------------------------------------------------
- Dash 組件 ID 在 DashboardGenerator 與 CallbackHandler 之間必須一致
- 互動狀態只存在 dcc.Store，勿改為模組層級變數
"""

from .Base_plotter import BasePlotter
from .CallbackHandler_plotter import CallbackHandler
from .ChartComponents_plotter import ChartComponents
from .DashboardGenerator_plotter import DashboardGenerator
from .InteractionController_plotter import (
    InteractionState,
    LineInteractionController,
    ScatterInteractionController,
)
from .PointIndex_plotter import PointIndex
from .ScaleMapper_plotter import LinearScale, TimeScale

__all__ = [
    "BasePlotter",
    "CallbackHandler",
    "ChartComponents",
    "DashboardGenerator",
    "InteractionState",
    "LineInteractionController",
    "ScatterInteractionController",
    "PointIndex",
    "LinearScale",
    "TimeScale",
]
