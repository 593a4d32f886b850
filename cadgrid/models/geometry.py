"""
几何模型 - 点/边界框/网格定义

网格约定：原点为左上角，列向右（x增大），行向下（y减小）
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Point2D(BaseModel):
    """二维点"""
    x: float
    y: float


class BBox(BaseModel):
    """边界框"""
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> Point2D:
        return Point2D(x=(self.xmin + self.xmax) / 2, y=(self.ymin + self.ymax) / 2)

    @property
    def top_left(self) -> Point2D:
        return Point2D(x=self.xmin, y=self.ymax)

    def contains_point(self, point: Point2D) -> bool:
        """判断点是否在框内（边界包含）"""
        return (
            self.xmin <= point.x <= self.xmax and
            self.ymin <= point.y <= self.ymax
        )


class GridSpec(BaseModel):
    """网格定义：原点(左上) + 单元宽高 + 列数，行数不限"""
    origin: Point2D
    cell_width: float = Field(..., gt=0)
    cell_height: float = Field(..., gt=0)
    columns: int = Field(..., ge=1)

    def cell_bounds(self, row: int, col: int) -> BBox:
        """
        计算单元边界

        公式:
            xmin = origin.x + col * W
            ymax = origin.y - row * H
            xmax = xmin + W
            ymin = ymax - H
        """
        xmin = self.origin.x + col * self.cell_width
        ymax = self.origin.y - row * self.cell_height
        return BBox(
            xmin=xmin,
            ymin=ymax - self.cell_height,
            xmax=xmin + self.cell_width,
            ymax=ymax,
        )


class Cell(BaseModel):
    """网格单元（按需生成，不持久化）"""
    row: int
    col: int
    bounds: BBox

