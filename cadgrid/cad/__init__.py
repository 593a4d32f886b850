"""
CAD 处理模块 - 阵列识别/递归炸开/网格分区/DXF导出

子模块：
- array_classifier: 关联阵列识别（四项信号）
- array_flattener: 块参照递归炸开与阵列替换
- grid_partitioner: 固定单元网格扫描与匹配
- naming: 标签文本转安全文件名
- grid_exporter: 网格分区导出编排
- dxf_source: ezdxf 图纸数据源
- dxf_sink: 单元DXF/DWG输出
- oda_converter: DWG↔DXF 转换
"""

from .array_classifier import is_array
from .array_flattener import ArrayExploder, flatten, flatten_all
from .dxf_sink import DxfExportSink
from .dxf_source import EzdxfDrawingSource
from .grid_exporter import GridExporter
from .grid_partitioner import iter_cells, partition
from .naming import sanitize_filename, unique_name
from .oda_converter import ODAConverter

__all__ = [
    "is_array",
    "flatten",
    "flatten_all",
    "ArrayExploder",
    "iter_cells",
    "partition",
    "sanitize_filename",
    "unique_name",
    "GridExporter",
    "EzdxfDrawingSource",
    "DxfExportSink",
    "ODAConverter",
]
