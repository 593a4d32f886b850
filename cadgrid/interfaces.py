"""
模块接口契约 - 定义图纸数据源与导出端的抽象接口

设计原则：
1. 核心算法（阵列识别/炸开/网格分区）只通过接口访问图纸
2. 图纸实体对核心算法不透明，由数据源持有
3. 便于单元测试和mock替换

使用方式：
    from cadgrid.interfaces import IDrawingSource

    class MyDrawingSource(IDrawingSource):
        def enumerate_entities(self, space: str = "Model") -> list[Any]:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import BBox, LabelRecord, MetadataBag, ReactorRef


# ============================================================================
# 图纸数据源接口
# ============================================================================

class IDrawingSource(ABC):
    """图纸数据源接口 - 实体枚举/几何查询/炸开/增删"""

    @abstractmethod
    def enumerate_entities(self, space: str = "Model") -> list[Any]:
        """
        枚举指定空间内的全部实体（按数据源遍历顺序）

        Args:
            space: 布局名称（默认模型空间）

        Returns:
            实体列表（快照，遍历期间不反映后续增删）
        """
        ...

    @abstractmethod
    def get_extents(self, entity: Any) -> BBox:
        """
        获取实体的轴对齐边界框

        Raises:
            ExtentsError: 实体无有效几何（退化/零几何）
        """
        ...

    @abstractmethod
    def get_layer(self, entity: Any) -> str:
        """获取实体图层名"""
        ...

    @abstractmethod
    def is_block_instance(self, entity: Any) -> bool:
        """判断实体是否为块参照"""
        ...

    @abstractmethod
    def get_instance_metadata(self, block: Any) -> MetadataBag | None:
        """块参照自身扩展字典的键集合，无字典时返回None"""
        ...

    @abstractmethod
    def get_definition_metadata(self, block: Any) -> MetadataBag | None:
        """块定义扩展字典的键集合，无字典时返回None"""
        ...

    @abstractmethod
    def get_definition_name(self, block: Any) -> str:
        """块定义名称"""
        ...

    @abstractmethod
    def get_reactors(self, instance: Any) -> list[ReactorRef]:
        """
        获取挂接在块参照上的持久反应器

        无效或已删除的反应器不返回
        """
        ...

    @abstractmethod
    def explode(self, instance: Any) -> list[Any]:
        """
        将块参照炸开一层，返回直接组成实体（不修改图纸）

        Raises:
            ExplodeError: 几何引擎拒绝炸开
        """
        ...

    @abstractmethod
    def retire(self, entity: Any) -> None:
        """从图纸中删除实体"""
        ...

    @abstractmethod
    def insert(self, entities: Iterable[Any], space: str = "Model") -> None:
        """将实体加入指定空间"""
        ...

    @abstractmethod
    def get_label(self, entity: Any) -> LabelRecord | None:
        """文本实体转为标签记录，非文本返回None"""
        ...

    @abstractmethod
    def find_block_instance(
        self,
        handle: str | None = None,
        name: str | None = None,
        space: str = "Model",
    ) -> Any | None:
        """按句柄或块名查找块参照（句柄优先）"""
        ...


# ============================================================================
# 导出端接口
# ============================================================================

class IExportSink(ABC):
    """导出端接口 - 每个网格单元输出一个文件"""

    @abstractmethod
    def export(self, name: str, entities: list[Any]) -> Path:
        """
        克隆实体并输出为独立文件

        Args:
            name: 已清洗的文件名（不含扩展名）
            entities: 待导出实体

        Returns:
            输出文件路径

        Raises:
            ExportError: 输出失败
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class CadGridError(Exception):
    """基础异常"""
    pass


class DrawingLoadError(CadGridError):
    """图纸读取错误"""
    pass


class ConversionError(CadGridError):
    """DWG/DXF转换错误"""
    pass


class ExtentsError(CadGridError):
    """边界框不可用"""
    pass


class ExplodeError(CadGridError):
    """炸开失败"""
    pass


class ExportError(CadGridError):
    """导出错误"""
    pass


class MetadataUnavailable(CadGridError):
    """元数据不可读（仅阵列识别内部使用）"""
    pass


class OriginUnavailableError(CadGridError):
    """网格基准块边界不可用，无法确定原点"""
    pass
