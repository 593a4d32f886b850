"""
cadgrid - 阵列炸开与网格分区轮廓导出

模块结构：
- config/     运行期配置加载
- models/     数据模型定义
- cad/        CAD 处理（阵列识别/递归炸开/网格分区/DXF导出）
- pipeline/   流水线编排与运行记录
- cli         命令行入口
"""

__version__ = "0.1.0"
