"""
配置层 - 加载运行期配置

职责：
- 加载 config/cadgrid.yaml（网格常量/图层/炸开/导出/ODA）
- 提供类型安全的配置访问接口
"""

from .runtime_config import (
    ExportConfig,
    FlattenConfig,
    GridConfig,
    LayerConfig,
    RuntimeConfig,
    get_config,
    reload_config,
)

__all__ = [
    "RuntimeConfig",
    "GridConfig",
    "LayerConfig",
    "FlattenConfig",
    "ExportConfig",
    "get_config",
    "reload_config",
]
