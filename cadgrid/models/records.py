"""
图纸记录模型 - 标签/元数据/反应器/导出单元

实体本身由图纸数据源持有，这里只保存引用（arbitrary types）
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .geometry import BBox, Point2D


class LabelRecord(BaseModel):
    """名称锚点（文本位置 + 文本内容）"""
    position: Point2D
    text: str


class MetadataBag(BaseModel):
    """扩展字典键集合"""
    keys: frozenset[str] = Field(default_factory=frozenset)

    def __contains__(self, key: object) -> bool:
        return key in self.keys

    @classmethod
    def of(cls, *keys: str) -> MetadataBag:
        return cls(keys=frozenset(keys))


class ReactorRef(BaseModel):
    """持久反应器引用"""
    handle: str = ""
    class_name: str


class CellMatch(BaseModel):
    """网格单元匹配结果：标签 + 中心落在单元内的轮廓实体"""
    row: int
    col: int
    bounds: BBox
    label: str
    entities: list[Any] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def is_empty(self) -> bool:
        return not self.entities


class ExportUnit(BaseModel):
    """导出单元：文件名 + 实体列表"""
    name: str
    entities: list[Any] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}
