"""
阵列炸开器 - 递归炸开块参照直至基本图元

职责：
1. flatten: 单个块参照深度优先递归炸开（纯函数，不修改图纸）
2. flatten_all: 对实体列表逐个展平，基本图元原样保留
3. ArrayExploder: 对选择集中的关联阵列执行炸开，插入图元并删除原块

失败策略：
- 顶层炸开失败：抛出 ExplodeError，图纸不变
- 嵌套块炸开失败：保留该嵌套块参照本身，不影响父级
- 超过深度上限：按炸开失败处理

测试要点：
- test_depth_first_order: 深度优先、保持炸开顺序
- test_nested_failure_keeps_instance: 嵌套失败降级
- test_depth_guard_on_cycle: 深度保护
- test_idempotent: 基本图元列表重复展平不变
"""

from __future__ import annotations

import logging
from typing import Any

from ..interfaces import ExplodeError, IDrawingSource
from ..models import ExplodeReport
from .array_classifier import is_array

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


def flatten(
    entity: Any,
    source: IDrawingSource,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> list[Any]:
    """
    递归炸开块参照

    Args:
        entity: 块参照
        source: 图纸数据源
        max_depth: 最大嵌套深度（图纸异常出现循环引用时兜底）

    Returns:
        基本图元列表（深度优先，顺序同炸开结果）

    Raises:
        ExplodeError: 本层炸开失败或超过深度上限
    """
    if _depth >= max_depth:
        raise ExplodeError(f"嵌套深度超过上限: {max_depth}")

    children = source.explode(entity)

    results: list[Any] = []
    for child in children:
        if source.is_block_instance(child):
            try:
                results.extend(flatten(child, source, max_depth, _depth + 1))
            except ExplodeError as e:
                logger.debug(f"嵌套块炸开失败，保留原块: {e}")
                results.append(child)
        else:
            results.append(child)
    return results


def flatten_all(
    entities: list[Any],
    source: IDrawingSource,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Any]:
    """展平实体列表：块参照逐个炸开（失败保留），其余原样保留"""
    results: list[Any] = []
    for entity in entities:
        if not source.is_block_instance(entity):
            results.append(entity)
            continue
        try:
            results.extend(flatten(entity, source, max_depth))
        except ExplodeError:
            results.append(entity)
    return results


class ArrayExploder:
    """关联阵列炸开编排：识别 → 递归炸开 → 插入图元 → 删除原块"""

    def __init__(self, source: IDrawingSource, max_depth: int = DEFAULT_MAX_DEPTH):
        self.source = source
        self.max_depth = max_depth

    def explode_arrays(self, selection: list[Any], space: str = "Model") -> ExplodeReport:
        """
        炸开选择集中的全部关联阵列

        单个阵列失败只记录告警，继续处理下一个
        """
        report = ExplodeReport(selected=len(selection))

        for entity in selection:
            if not self.source.is_block_instance(entity):
                continue
            if not is_array(entity, self.source):
                continue
            report.arrays_found += 1

            try:
                primitives = flatten(entity, self.source, self.max_depth)
            except ExplodeError as e:
                handle = self._handle_of(entity)
                logger.warning(f"阵列炸开失败: {handle}: {e}")
                report.failed += 1
                report.failures.append(handle)
                continue

            self.source.insert(primitives, space)
            self.source.retire(entity)
            report.exploded += 1
            report.entities_created += len(primitives)

        logger.info(
            f"阵列炸开完成: 识别 {report.arrays_found}, 炸开 {report.exploded}, "
            f"失败 {report.failed}"
        )
        return report

    @staticmethod
    def _handle_of(entity: Any) -> str:
        dxf = getattr(entity, "dxf", None)
        handle = getattr(dxf, "handle", None) if dxf is not None else None
        return str(handle) if handle else repr(entity)
