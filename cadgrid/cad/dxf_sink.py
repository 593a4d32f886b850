"""
DXF导出端 - 每个网格单元输出一个DXF（可选转DWG）

职责：
1. 新建文档并复制单元内实体（块参照按虚拟实体展开复制）
2. 补齐图层表，视口缩放至实体范围
3. 输出DXF，按配置经ODA转换为DWG

依赖：
- ezdxf: DXF写出
- ODAConverter: DXF→DWG转换（output_format=dwg时）
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import ezdxf
from ezdxf import zoom

from ..interfaces import ConversionError, ExportError, IExportSink
from .dxf_source import explode_insert
from .oda_converter import ODAConverter

logger = logging.getLogger(__name__)


class DxfExportSink(IExportSink):
    """单元DXF/DWG输出"""

    def __init__(
        self,
        output_dir: Path,
        dxfversion: str = "R2018",
        output_format: str = "dxf",
        oda_converter: ODAConverter | None = None,
    ):
        self.output_dir = output_dir
        self.dxfversion = dxfversion
        self.output_format = output_format
        self.oda = oda_converter
        if output_format == "dwg" and self.oda is None:
            self.oda = ODAConverter()

    def export(self, name: str, entities: list[Any]) -> Path:
        """复制实体到新文档并输出"""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"输出目录不可用: {self.output_dir}: {e}") from e

        doc = ezdxf.new(dxfversion=self.dxfversion)
        msp = doc.modelspace()

        copied = 0
        for entity in entities:
            for item in self._iter_clonable(entity):
                try:
                    self._ensure_layer(doc, item.dxf.get("layer", "0"))
                    msp.add_foreign_entity(item)
                    copied += 1
                except Exception as e:  # noqa: BLE001
                    logger.debug(f"实体复制跳过: {item.dxftype()}: {e}")

        if entities and copied == 0:
            raise ExportError(f"无可复制实体: {name}")
        if copied:
            zoom.extents(msp)

        dxf_path = self.output_dir / f"{name}.dxf"
        try:
            doc.saveas(str(dxf_path))
        except OSError as e:
            raise ExportError(f"DXF写出失败: {dxf_path}: {e}") from e

        if self.output_format != "dwg":
            return dxf_path

        try:
            return self.oda.dxf_to_dwg(dxf_path, self.output_dir)
        except ConversionError as e:
            raise ExportError(f"DWG转换失败: {name}: {e}") from e

    def _iter_clonable(self, entity: Any) -> Iterator[Any]:
        """块参照展开为虚拟实体（递归，含MINSERT副本），其余原样返回"""
        if entity.dxftype() != "INSERT":
            yield entity
            return
        try:
            children = explode_insert(entity)
        except Exception as e:  # noqa: BLE001
            logger.debug(f"块参照展开失败，跳过: {entity.dxf.get('name', '?')}: {e}")
            return
        for child in children:
            yield from self._iter_clonable(child)

    @staticmethod
    def _ensure_layer(doc, layer: str) -> None:
        if not doc.layers.has_entry(layer):
            doc.layers.new(layer)
