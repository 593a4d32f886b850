"""
流水线执行器 - 编排网格导出各阶段

职责：
1. 按顺序执行各阶段（读取 → 定原点 → 炸开阵列 → 分区导出 → 另存）
2. 更新运行进度并持久化 run.json
3. 阶段失败记录标记后终止运行；单元/单阵列失败在阶段内部隔离

测试要点：
- test_execute_full_pipeline: 完整流水线执行
- test_origin_failure_marks_run_failed: 原点失败终止
- test_flatten_disabled_skips_stages: 关闭炸开跳过阶段
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from ..cad import ArrayExploder, DxfExportSink, EzdxfDrawingSource, GridExporter
from ..config import RuntimeConfig, get_config
from ..interfaces import IDrawingSource, IExportSink, OriginUnavailableError
from ..models import ExportRun
from .stages import GRID_EXPORT_STAGES, PipelineStage, StageEnum

logger = logging.getLogger(__name__)


def create_run(input_file: Path, output_dir: Path | None = None) -> ExportRun:
    """创建运行记录（输出目录默认按输入文件名区分）"""
    config = get_config()
    return ExportRun(
        run_id=str(uuid.uuid4()),
        input_file=input_file,
        output_dir=output_dir or config.get_run_dir(input_file),
    )


class PipelineExecutor:
    """流水线执行器"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()

    def execute(
        self,
        run: ExportRun,
        source: IDrawingSource | None = None,
        sink: IExportSink | None = None,
    ) -> ExportRun:
        """执行流水线（source/sink 可注入，默认按输入文件构建）"""
        run.mark_running()
        run.output_dir.mkdir(parents=True, exist_ok=True)
        self._persist_run(run, message="运行开始")

        # 中间数据存储
        context: dict[str, Any] = {
            "source": source,
            "sink": sink,
            "reference_block": None,
        }

        try:
            for stage in GRID_EXPORT_STAGES:
                if stage.requires_flatten and not self.config.flatten.enabled:
                    logger.info(f"[{run.run_id}] 跳过阶段: {stage.name}")
                    continue
                self._execute_stage(run, stage, context)

            run.mark_succeeded()
            self._persist_run(run, message="运行完成")

        except Exception as e:
            logger.exception(f"流水线执行失败: {run.run_id}")
            run.mark_failed(str(e))
            self._persist_run(run, message=f"运行失败: {e}")
            raise

        return run

    def _execute_stage(self, run: ExportRun, stage: PipelineStage, context: dict) -> None:
        """执行单个阶段"""
        run.progress.stage = stage.name
        run.progress.percent = stage.progress_start
        logger.info(f"[{run.run_id}] 开始阶段: {stage.name}")

        try:
            if stage.name == StageEnum.LOAD_DRAWING.value:
                self._stage_load(run, context)

            elif stage.name == StageEnum.RESOLVE_ORIGIN.value:
                self._stage_resolve_origin(run, context)

            elif stage.name == StageEnum.EXPLODE_ARRAYS.value:
                self._stage_explode(run, context)

            elif stage.name == StageEnum.PARTITION_AND_EXPORT.value:
                self._stage_partition_export(run, context)

            elif stage.name == StageEnum.SAVE_FLATTENED.value:
                self._stage_save_flattened(run, context)

        except Exception as e:
            logger.error(f"[{run.run_id}] 阶段失败 {stage.name}: {e}")
            run.add_flag(f"阶段失败:{stage.name}")
            raise

        run.progress.percent = stage.progress_end
        self._persist_run(run, message=f"完成阶段: {stage.name}")

    def _stage_load(self, run: ExportRun, context: dict) -> None:
        """读取图纸"""
        if context["source"] is None:
            context["source"] = EzdxfDrawingSource.from_file(
                run.input_file, work_dir=run.output_dir / "work"
            )
        if context["sink"] is None:
            source = context["source"]
            dxfversion = self.config.export.dxfversion or getattr(
                source, "dxfversion", "R2018"
            )
            context["sink"] = DxfExportSink(
                run.output_dir / "cells",
                dxfversion=dxfversion,
                output_format=self.config.export.output_format,
            )
        run.artifacts.cells_dir = getattr(context["sink"], "output_dir", None)

    def _stage_resolve_origin(self, run: ExportRun, context: dict) -> None:
        """查找网格基准块（句柄优先，其次块名）"""
        grid_cfg = self.config.grid
        if not grid_cfg.reference_handle and not grid_cfg.reference_block:
            raise OriginUnavailableError("未配置网格基准块（reference_block/reference_handle）")

        block = context["source"].find_block_instance(
            handle=grid_cfg.reference_handle,
            name=grid_cfg.reference_block,
        )
        if block is None:
            raise OriginUnavailableError(
                f"未找到网格基准块: {grid_cfg.reference_handle or grid_cfg.reference_block}"
            )
        # 提前校验边界，失败即终止
        self._build_exporter(context).resolve_origin(block)
        context["reference_block"] = block

    def _stage_explode(self, run: ExportRun, context: dict) -> None:
        """炸开模型空间内的关联阵列（基准块除外）"""
        source = context["source"]
        reference_block = context["reference_block"]
        selection = [
            entity
            for entity in source.enumerate_entities("Model")
            if entity is not reference_block
        ]
        exploder = ArrayExploder(source, max_depth=self.config.flatten.max_depth)
        report = exploder.explode_arrays(selection)
        run.explode_report = report
        if report.failed:
            run.add_flag(f"阵列炸开失败:{report.failed}")

    def _stage_partition_export(self, run: ExportRun, context: dict) -> None:
        """网格分区并逐单元导出"""
        exporter = self._build_exporter(context)
        report = exporter.export_grid(context["reference_block"])
        run.grid_report = report
        run.artifacts.cell_files = [
            outcome.output_path for outcome in report.outcomes if outcome.output_path
        ]
        if report.cells_failed:
            run.add_flag(f"单元导出失败:{report.cells_failed}")
        logger.info(f"[{run.run_id}] {report.summary()}")

    def _stage_save_flattened(self, run: ExportRun, context: dict) -> None:
        """另存炸开后的图纸"""
        source = context["source"]
        if not self.config.flatten.save_flattened:
            return
        if not isinstance(source, EzdxfDrawingSource):
            return
        if not run.explode_report or not run.explode_report.exploded:
            return
        path = run.output_dir / f"{run.input_file.stem}_flattened.dxf"
        run.artifacts.flattened_dxf = source.save(path)

    def _build_exporter(self, context: dict) -> GridExporter:
        return GridExporter(
            context["source"],
            context["sink"],
            grid_config=self.config.grid,
            layer_config=self.config.layers,
            export_config=self.config.export,
        )

    def _persist_run(self, run: ExportRun, message: str | None = None) -> None:
        if message is not None:
            run.progress.message = message
        run_file = run.output_dir / "run.json"
        run.artifacts.run_json = run_file
        with open(run_file, "w", encoding="utf-8") as f:
            json.dump(run.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)
