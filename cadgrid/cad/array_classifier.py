"""
阵列识别器 - 判断块参照是否为关联阵列

识别策略（按优先级依次判断，任一命中即为阵列）：
1. 块参照自身扩展字典含 ACAD_ASSOCNETWORK
2. 块定义扩展字典含 ACAD_ASSOCNETWORK（关联网络通常挂在定义上）
3. 持久反应器类名含 AssocDependency / AssocArray
4. 块定义名以 *A 开头（匿名阵列命名，不区分大小写）

元数据缺失/不可读一律视为该项未命中，不抛错

测试要点：
- test_anonymous_array_name: 单一信号即可判定
- test_no_signal: 全部缺失返回False
- test_metadata_unavailable_is_not_error: 元数据异常视为未命中
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..interfaces import IDrawingSource, MetadataUnavailable

ASSOC_NETWORK_KEY = "ACAD_ASSOCNETWORK"
ASSOC_REACTOR_MARKERS = ("AssocDependency", "AssocArray")
ANONYMOUS_ARRAY_PREFIX = "*A"

ArrayPredicate = Callable[[Any, IDrawingSource], bool]


def has_instance_assoc_network(block: Any, source: IDrawingSource) -> bool:
    bag = source.get_instance_metadata(block)
    return bag is not None and ASSOC_NETWORK_KEY in bag


def has_definition_assoc_network(block: Any, source: IDrawingSource) -> bool:
    bag = source.get_definition_metadata(block)
    return bag is not None and ASSOC_NETWORK_KEY in bag


def has_assoc_reactor(block: Any, source: IDrawingSource) -> bool:
    for reactor in source.get_reactors(block):
        if any(marker in reactor.class_name for marker in ASSOC_REACTOR_MARKERS):
            return True
    return False


def has_anonymous_array_name(block: Any, source: IDrawingSource) -> bool:
    name = source.get_definition_name(block) or ""
    return name.upper().startswith(ANONYMOUS_ARRAY_PREFIX)


ARRAY_PREDICATES: list[ArrayPredicate] = [
    has_instance_assoc_network,
    has_definition_assoc_network,
    has_assoc_reactor,
    has_anonymous_array_name,
]


def _check(predicate: ArrayPredicate, block: Any, source: IDrawingSource) -> bool:
    try:
        return predicate(block, source)
    except MetadataUnavailable:
        return False


def is_array(block: Any, source: IDrawingSource) -> bool:
    """判断块参照是否为关联阵列（任一信号命中即为True）"""
    return any(_check(predicate, block, source) for predicate in ARRAY_PREDICATES)
