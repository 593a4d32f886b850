"""
数据模型单元测试
"""

import pytest
from pydantic import ValidationError

from cadgrid.models import (
    BBox,
    CellOutcome,
    CellStatus,
    ExportRun,
    GridExportReport,
    GridSpec,
    MetadataBag,
    Point2D,
    RunStatus,
)


class TestBBox:
    """边界框测试"""

    def test_width_height_center(self):
        box = BBox(xmin=0, ymin=-3000, xmax=6000, ymax=0)
        assert box.width == 6000
        assert box.height == 3000
        assert box.center == Point2D(x=3000, y=-1500)
        assert box.top_left == Point2D(x=0, y=0)

    def test_contains_point_inclusive(self):
        box = BBox(xmin=0, ymin=0, xmax=10, ymax=10)
        assert box.contains_point(Point2D(x=0, y=0))
        assert box.contains_point(Point2D(x=10, y=10))
        assert not box.contains_point(Point2D(x=10.001, y=5))


class TestGridSpec:
    """网格定义测试"""

    def test_cell_bounds_grow_right_and_down(self):
        grid = GridSpec(origin=Point2D(x=100, y=50), cell_width=6000, cell_height=3000, columns=10)
        bounds = grid.cell_bounds(2, 3)
        assert bounds.xmin == 100 + 3 * 6000
        assert bounds.xmax == 100 + 4 * 6000
        assert bounds.ymax == 50 - 2 * 3000
        assert bounds.ymin == 50 - 3 * 3000

    def test_invalid_dimensions_rejected(self):
        with pytest.raises(ValidationError):
            GridSpec(origin=Point2D(x=0, y=0), cell_width=0, cell_height=1, columns=1)
        with pytest.raises(ValidationError):
            GridSpec(origin=Point2D(x=0, y=0), cell_width=1, cell_height=1, columns=0)


class TestMetadataBag:
    def test_contains(self):
        bag = MetadataBag.of("ACAD_ASSOCNETWORK")
        assert "ACAD_ASSOCNETWORK" in bag
        assert "OTHER" not in bag


class TestGridExportReport:
    """汇总计数测试"""

    def test_add_outcome_counts(self):
        grid = GridSpec(origin=Point2D(x=0, y=0), cell_width=1, cell_height=1, columns=2)
        report = GridExportReport(grid=grid)
        report.add_outcome(CellOutcome(row=0, col=0, label="A", status=CellStatus.EXPORTED))
        report.add_outcome(CellOutcome(row=0, col=1, label="B", status=CellStatus.EMPTY))
        report.add_outcome(CellOutcome(row=1, col=0, label="C", status=CellStatus.FAILED))
        assert report.cells_processed == 3
        assert (report.cells_exported, report.cells_empty, report.cells_failed) == (1, 1, 1)


class TestExportRun:
    """运行记录测试"""

    @pytest.fixture
    def run(self, temp_dir) -> ExportRun:
        return ExportRun(run_id="r1", input_file=temp_dir / "a.dxf", output_dir=temp_dir)

    def test_mark_running(self, run: ExportRun):
        run.mark_running("RESOLVE_ORIGIN")
        assert run.status == RunStatus.RUNNING
        assert run.progress.stage == "RESOLVE_ORIGIN"
        assert run.started_at is not None

    def test_mark_succeeded(self, run: ExportRun):
        run.mark_running()
        run.mark_succeeded()
        assert run.status == RunStatus.SUCCEEDED
        assert run.progress.percent == 100

    def test_mark_failed(self, run: ExportRun):
        run.mark_running()
        run.mark_failed("Test error")
        assert run.status == RunStatus.FAILED
        assert "Test error" in run.errors

    def test_add_flag(self, run: ExportRun):
        run.add_flag("单元导出失败:1")
        run.add_flag("单元导出失败:1")
        assert run.flags == ["单元导出失败:1"]
