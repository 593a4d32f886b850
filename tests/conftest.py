"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(scenario_source, memory_sink):
        exporter = GridExporter(scenario_source, memory_sink)
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import ezdxf
import pytest

from cadgrid.config import GridConfig, LayerConfig, RuntimeConfig
from cadgrid.models import BBox

from .fakes import FakeDrawingSource, FakeEntity, MemorySink, block, primitive, text


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """运行期配置（默认值）"""
    return RuntimeConfig()


@pytest.fixture
def grid_config() -> GridConfig:
    return GridConfig(cell_width=6000, cell_height=3000, columns=10, reference_block="GRID")


@pytest.fixture
def layer_config() -> LayerConfig:
    return LayerConfig(label_layer="P_Names", contour_layers=["Contour"])


# ============================================================================
# 数据源 Fixtures
# ============================================================================

@pytest.fixture
def reference_block() -> FakeEntity:
    """网格基准块：左上角 (0, 0)"""
    return block(
        "grid",
        definition_name="GRID",
        layer="Grid",
        extents=BBox(xmin=0, ymin=-6000, xmax=60000, ymax=0),
    )


@pytest.fixture
def scenario_source(reference_block: FakeEntity) -> FakeDrawingSource:
    """两标签两轮廓：A1含1个轮廓，A2为空，第三格无标签"""
    return FakeDrawingSource(
        [
            reference_block,
            text("A1", 3000, -1500),
            text("A2", 9000, -1500),
            primitive("c1", 3000, -1500),
            primitive("c2", 20000, -1500),
        ]
    )


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


# ============================================================================
# ezdxf 文档 Fixtures
# ============================================================================

@pytest.fixture
def dxf_doc():
    """
    真实DXF文档：
    - GRID 基准块插入于原点，外框 (0,-6000)-(18000,0)
    - P_Names 文本 A1/A2
    - Contour 图层圆（中心在A1单元）
    - *A 匿名阵列块，内含两个 CELL 块参照（各含一条直线）
    """
    doc = ezdxf.new("R2018")
    for name in ("Grid", "P_Names", "Contour"):
        doc.layers.new(name)

    grid = doc.blocks.new(name="GRID")
    grid.add_lwpolyline(
        [(0, 0), (18000, 0), (18000, -6000), (0, -6000)],
        close=True,
        dxfattribs={"layer": "Grid"},
    )

    cell = doc.blocks.new(name="CELL")
    cell.add_line((0, 0), (100, 0), dxfattribs={"layer": "Contour"})

    array = doc.blocks.new_anonymous_block(type_char="A")
    array.add_blockref("CELL", (2900, -1600), dxfattribs={"layer": "Contour"})
    array.add_blockref("CELL", (8900, -1600), dxfattribs={"layer": "Contour"})

    msp = doc.modelspace()
    msp.add_blockref("GRID", (0, 0), dxfattribs={"layer": "Grid"})
    msp.add_text("A1", dxfattribs={"layer": "P_Names", "insert": (3000, -1500), "height": 250})
    msp.add_text("A2", dxfattribs={"layer": "P_Names", "insert": (9000, -1500), "height": 250})
    msp.add_circle((3000, -1500), radius=500, dxfattribs={"layer": "Contour"})
    msp.add_blockref(array.name, (0, 0), dxfattribs={"layer": "Contour"})
    return doc


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
