"""
DXF图纸数据源 - 基于 ezdxf 的 IDrawingSource 实现

职责：
1. 读取DXF（DWG经ODA转换）并枚举布局实体
2. 提供边界框/图层/扩展字典/反应器等查询
3. 块参照单层炸开（virtual_entities，不修改图纸）
4. 删除原块、插入炸开后的图元、另存图纸

依赖：
- ezdxf: DXF解析与修改
- ODAConverter: DWG→DXF转换（可选）
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import ezdxf
from ezdxf import bbox
from ezdxf.entities import factory

from ..interfaces import (
    DrawingLoadError,
    ExplodeError,
    ExtentsError,
    IDrawingSource,
    MetadataUnavailable,
)
from ..models import BBox, LabelRecord, MetadataBag, Point2D, ReactorRef
from .oda_converter import ODAConverter

logger = logging.getLogger(__name__)

TEXT_TYPES = ("TEXT", "MTEXT")


def explode_insert(insert: Any) -> list[Any]:
    """块参照单层炸开为虚拟实体（MINSERT 按阵列逐个副本展开）"""
    if insert.mcount > 1:
        entities: list[Any] = []
        for copy in insert.multi_insert():
            entities.extend(copy.virtual_entities())
        return entities
    return list(insert.virtual_entities())


class EzdxfDrawingSource(IDrawingSource):
    """ezdxf 文档封装"""

    def __init__(self, doc, source_path: Path | None = None):
        self.doc = doc
        self.source_path = source_path
        self._class_names: dict[str, str] | None = None

    @classmethod
    def from_file(
        cls,
        path: Path,
        work_dir: Path | None = None,
        oda_converter: ODAConverter | None = None,
    ) -> EzdxfDrawingSource:
        """读取图纸文件（.dwg 先经ODA转换为DXF）"""
        if not path.exists():
            raise DrawingLoadError(f"图纸文件不存在: {path}")

        dxf_path = path
        if path.suffix.lower() == ".dwg":
            oda = oda_converter or ODAConverter()
            dxf_path = oda.dwg_to_dxf(path, work_dir or path.parent)

        try:
            doc = ezdxf.readfile(str(dxf_path))
        except Exception as e:
            raise DrawingLoadError(f"DXF解析失败: {e}") from e

        return cls(doc, source_path=path)

    @property
    def dxfversion(self) -> str:
        return self.doc.dxfversion

    def save(self, path: Path) -> Path:
        """另存图纸（DXF）"""
        path.parent.mkdir(parents=True, exist_ok=True)
        self.doc.saveas(str(path))
        return path

    # === 实体枚举与几何 ===

    def _layout(self, space: str):
        if space.lower() == "model":
            return self.doc.modelspace()
        return self.doc.layouts.get(space)

    def enumerate_entities(self, space: str = "Model") -> list[Any]:
        return list(self._layout(space))

    def get_extents(self, entity: Any) -> BBox:
        try:
            box = bbox.extents([entity], fast=True)
        except Exception as e:
            raise ExtentsError(f"边界框计算失败: {entity.dxftype()}: {e}") from e
        if not box.has_data:
            raise ExtentsError(f"实体无几何范围: {entity.dxftype()}")
        return BBox(
            xmin=box.extmin.x,
            ymin=box.extmin.y,
            xmax=box.extmax.x,
            ymax=box.extmax.y,
        )

    def get_layer(self, entity: Any) -> str:
        return entity.dxf.get("layer", "0")

    def is_block_instance(self, entity: Any) -> bool:
        return entity.dxftype() == "INSERT"

    # === 阵列识别所需元数据 ===

    def get_instance_metadata(self, block: Any) -> MetadataBag | None:
        return self._xdict_keys(block)

    def get_definition_metadata(self, block: Any) -> MetadataBag | None:
        layout = block.block()
        if layout is None:
            return None
        return self._xdict_keys(layout.block_record)

    def get_definition_name(self, block: Any) -> str:
        return block.dxf.get("name", "")

    def get_reactors(self, instance: Any) -> list[ReactorRef]:
        reactors: list[ReactorRef] = []
        for handle in instance.get_reactors():
            obj = self.doc.entitydb.get(handle)
            if obj is None or not obj.is_alive:
                continue
            reactors.append(ReactorRef(handle=handle, class_name=self._class_name(obj)))
        return reactors

    def _xdict_keys(self, owner: Any) -> MetadataBag | None:
        if owner is None or not owner.has_extension_dict:
            return None
        try:
            xdict = owner.get_extension_dict()
            return MetadataBag(keys=frozenset(xdict.dictionary.keys()))
        except Exception as e:
            raise MetadataUnavailable(f"扩展字典不可读: {e}") from e

    def _class_name(self, obj: Any) -> str:
        """DXF类型名映射为运行时类名（CLASSES段），无映射时返回DXF类型名"""
        if self._class_names is None:
            self._class_names = {}
            for dxf_class in self.doc.classes.classes.values():
                self._class_names[dxf_class.dxf.name] = dxf_class.dxf.cpp_class_name
        dxftype = obj.dxftype()
        return self._class_names.get(dxftype, dxftype)

    # === 炸开与增删 ===

    def explode(self, instance: Any) -> list[Any]:
        try:
            return explode_insert(instance)
        except Exception as e:
            raise ExplodeError(f"块炸开失败: {instance.dxf.get('name', '?')}: {e}") from e

    def retire(self, entity: Any) -> None:
        layout = self.doc.layouts.get_layout_for_entity(entity)
        layout.delete_entity(entity)

    def insert(self, entities: Iterable[Any], space: str = "Model") -> None:
        layout = self._layout(space)
        for entity in entities:
            factory.bind(entity, self.doc)
            layout.add_entity(entity)

    # === 文本与查找 ===

    def get_label(self, entity: Any) -> LabelRecord | None:
        if entity.dxftype() not in TEXT_TYPES:
            return None
        insert = entity.dxf.get("insert")
        if insert is None:
            return None
        return LabelRecord(
            position=Point2D(x=float(insert.x), y=float(insert.y)),
            text=self._get_text(entity),
        )

    def _get_text(self, entity: Any) -> str:
        if hasattr(entity, "plain_text"):
            return entity.plain_text().strip()
        return str(entity.dxf.get("text", "")).strip()

    def find_block_instance(
        self,
        handle: str | None = None,
        name: str | None = None,
        space: str = "Model",
    ) -> Any | None:
        if handle:
            entity = self.doc.entitydb.get(handle)
            if entity is not None and entity.is_alive and self.is_block_instance(entity):
                return entity
            return None
        if name:
            for entity in self._layout(space).query("INSERT"):
                if entity.dxf.name.lower() == name.lower():
                    return entity
        return None
