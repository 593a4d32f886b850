"""
流水线执行器单元测试
"""

import json

import pytest

from cadgrid.cad import DxfExportSink, EzdxfDrawingSource
from cadgrid.config import FlattenConfig, GridConfig, LayerConfig, RuntimeConfig
from cadgrid.interfaces import DrawingLoadError, OriginUnavailableError
from cadgrid.models import CellStatus
from cadgrid.models.run import RunStatus
from cadgrid.pipeline import GRID_EXPORT_STAGES, PipelineExecutor, StageEnum, create_run

from ..fakes import MemorySink


@pytest.fixture
def config() -> RuntimeConfig:
    return RuntimeConfig(
        grid=GridConfig(cell_width=6000, cell_height=3000, columns=10, reference_block="GRID"),
        layers=LayerConfig(label_layer="P_Names", contour_layers=["Contour"]),
    )


@pytest.fixture
def drawing(dxf_doc, temp_dir):
    path = temp_dir / "drawing.dxf"
    dxf_doc.saveas(str(path))
    return path


def test_stage_order():
    assert [s.name for s in GRID_EXPORT_STAGES] == [
        StageEnum.LOAD_DRAWING.value,
        StageEnum.RESOLVE_ORIGIN.value,
        StageEnum.EXPLODE_ARRAYS.value,
        StageEnum.PARTITION_AND_EXPORT.value,
        StageEnum.SAVE_FLATTENED.value,
    ]


class TestPipelineExecutor:
    """完整流水线测试"""

    def test_execute_full_pipeline(self, config, drawing, temp_dir):
        run = create_run(drawing, temp_dir / "out")
        PipelineExecutor(config).execute(run)

        assert run.status == RunStatus.SUCCEEDED
        assert run.progress.percent == 100
        assert run.explode_report.exploded == 1

        report = run.grid_report
        assert report.cells_processed == 2
        assert report.cells_exported == 2
        assert (report.stop_row, report.stop_col) == (0, 2)
        assert [o.entity_count for o in report.outcomes] == [2, 1]

        cells_dir = temp_dir / "out" / "cells"
        assert sorted(p.name for p in cells_dir.glob("*.dxf")) == ["A1.dxf", "A2.dxf"]
        assert (temp_dir / "out" / "drawing_flattened.dxf").exists()

    def test_run_json_persisted(self, config, drawing, temp_dir):
        run = create_run(drawing, temp_dir / "out")
        PipelineExecutor(config).execute(run)

        data = json.loads((temp_dir / "out" / "run.json").read_text(encoding="utf-8"))
        assert data["status"] == "succeeded"
        assert data["grid_report"]["cells_exported"] == 2

    def test_injected_source_and_sink(self, config, dxf_doc, drawing, temp_dir):
        sink = MemorySink()
        run = create_run(drawing, temp_dir / "out")
        PipelineExecutor(config).execute(run, source=EzdxfDrawingSource(dxf_doc), sink=sink)

        assert [name for name, _ in sink.exports] == ["A1", "A2"]
        types = sorted(e.dxftype() for e in sink.exports[0][1])
        assert types == ["CIRCLE", "LINE"]

    def test_flatten_disabled_skips_stages(self, config, drawing, temp_dir):
        config.flatten = FlattenConfig(enabled=False)
        run = create_run(drawing, temp_dir / "out")
        sink = DxfExportSink(temp_dir / "out" / "cells")
        PipelineExecutor(config).execute(run, sink=sink)

        assert run.explode_report is None
        report = run.grid_report
        assert report.cells_exported == 1
        assert report.outcomes[1].status == CellStatus.EMPTY
        assert not (temp_dir / "out" / "drawing_flattened.dxf").exists()

    def test_origin_failure_marks_run_failed(self, config, drawing, temp_dir):
        config.grid.reference_block = "MISSING"
        run = create_run(drawing, temp_dir / "out")

        with pytest.raises(OriginUnavailableError):
            PipelineExecutor(config).execute(run)

        assert run.status == RunStatus.FAILED
        assert run.errors
        assert "阶段失败:RESOLVE_ORIGIN" in run.flags
        assert not (temp_dir / "out" / "cells").exists()
        data = json.loads((temp_dir / "out" / "run.json").read_text(encoding="utf-8"))
        assert data["status"] == "failed"

    def test_reference_not_configured(self, drawing, temp_dir):
        run = create_run(drawing, temp_dir / "out")
        with pytest.raises(OriginUnavailableError):
            PipelineExecutor(RuntimeConfig()).execute(run)

    def test_missing_input(self, config, temp_dir):
        run = create_run(temp_dir / "missing.dxf", temp_dir / "out")
        with pytest.raises(DrawingLoadError):
            PipelineExecutor(config).execute(run)
        assert run.status == RunStatus.FAILED
