"""
网格分区器 - 按固定单元尺寸逐行扫描模型空间

扫描规则：
1. 从原点（左上角）开始，行向下、列向右，列数固定，行数不限
2. 单元内第一个标签（按来源顺序）作为单元名称
3. 某单元无标签时立即终止整个扫描（唯一终止条件）
4. 中心点落在单元内的轮廓全部归入该单元（按来源顺序）
5. 边界判定两端包含，落在公共边上的实体可能同时归入相邻单元

测试要点：
- test_cell_bounds: 单元边界计算
- test_stop_at_first_unlabeled: 首个无标签单元终止
- test_empty_cell_still_yielded: 无轮廓单元仍然输出
- test_shared_edge_duplication: 公共边重复归属
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from typing import Any

from ..models import Cell, CellMatch, GridSpec, LabelRecord, Point2D


def iter_cells(grid: GridSpec) -> Iterator[Cell]:
    """按扫描顺序无限生成网格单元"""
    for row in itertools.count():
        for col in range(grid.columns):
            yield Cell(row=row, col=col, bounds=grid.cell_bounds(row, col))


def find_label(cell: Cell, labels: Iterable[LabelRecord]) -> LabelRecord | None:
    """返回第一个位置落在单元内的标签"""
    for label in labels:
        if cell.bounds.contains_point(label.position):
            return label
    return None


def match_contours(
    cell: Cell, contours: Iterable[tuple[Any, Point2D]]
) -> list[Any]:
    """返回中心点落在单元内的轮廓实体"""
    return [entity for entity, center in contours if cell.bounds.contains_point(center)]


def partition(
    grid: GridSpec,
    labels: list[LabelRecord],
    contours: list[tuple[Any, Point2D]],
) -> Iterator[CellMatch]:
    """
    网格分区（惰性生成，遇到无标签单元即结束）

    Args:
        grid: 网格定义
        labels: 标签记录
        contours: (轮廓实体, 边界框中心) 列表

    Yields:
        CellMatch（轮廓为空的单元同样输出）
    """
    for cell in iter_cells(grid):
        label = find_label(cell, labels)
        if label is None:
            return
        yield CellMatch(
            row=cell.row,
            col=cell.col,
            bounds=cell.bounds,
            label=label.text,
            entities=match_contours(cell, contours),
        )

