"""
运行期配置 - 读取 config/cadgrid.yaml

职责：
- 加载网格常量/图层/炸开/导出/ODA等运行参数
- 提供环境变量覆盖机制（CADGRID_ 前缀，嵌套用 __ 分隔）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_PATH = Path("config/cadgrid.yaml")


class GridConfig(BaseModel):
    """网格常量（每次运行固定，不从图纸内容推导）"""

    model_config = {"validate_assignment": True}

    cell_width: float = Field(6000.0, gt=0)
    cell_height: float = Field(3000.0, gt=0)
    columns: int = Field(10, ge=1)
    reference_block: str | None = None
    reference_handle: str | None = None


class LayerConfig(BaseModel):
    """图层配置"""

    model_config = {"validate_assignment": True}

    label_layer: str = "P_Names"
    # 为空时：除文本与基准块外的全部实体都视为轮廓
    contour_layers: list[str] = Field(default_factory=list)


class FlattenConfig(BaseModel):
    """阵列炸开配置"""

    model_config = {"validate_assignment": True}

    enabled: bool = True
    max_depth: int = Field(32, ge=1)
    save_flattened: bool = True


class ExportConfig(BaseModel):
    """导出配置"""

    model_config = {"validate_assignment": True}

    output_format: Literal["dxf", "dwg"] = "dxf"
    dxfversion: str | None = None
    skip_empty: bool = True


class ODAConfig(BaseModel):
    """ODA转换器配置"""

    exe_path: str = ""
    work_dir: str | None = None
    output_version: str = "ACAD2018"


class TimeoutConfig(BaseModel):
    """超时配置"""

    oda_convert_sec: int = 600


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "cadgrid.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    output_dir: Path = Path("output")

    grid: GridConfig = Field(default_factory=GridConfig)
    layers: LayerConfig = Field(default_factory=LayerConfig)
    flatten: FlattenConfig = Field(default_factory=FlattenConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    oda: ODAConfig = Field(default_factory=ODAConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CADGRID_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置，文件不存在时使用默认值"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        kwargs: dict[str, Any] = {
            "grid": GridConfig(**cls._extract(runtime_opts, "grid")),
            "layers": LayerConfig(**cls._extract(runtime_opts, "layers")),
            "flatten": FlattenConfig(**cls._extract(runtime_opts, "flatten")),
            "export": ExportConfig(**cls._extract(runtime_opts, "export")),
            "oda": ODAConfig(**cls._extract(runtime_opts, "oda_converter")),
            "timeouts": TimeoutConfig(**cls._extract(runtime_opts, "timeouts")),
            "logging": LoggingConfig(**cls._extract(runtime_opts, "logging")),
        }
        if "output_dir" in runtime_opts:
            kwargs["output_dir"] = Path(runtime_opts["output_dir"])

        config = cls(**kwargs)
        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（{default: x} 形式取 x）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if self.oda.exe_path:
            exe_path = Path(self.oda.exe_path)
            if not exe_path.is_absolute():
                self.oda.exe_path = str((base_dir / exe_path).resolve())
        if self.oda.work_dir:
            work_dir = Path(self.oda.work_dir)
            if not work_dir.is_absolute():
                self.oda.work_dir = str((base_dir / work_dir).resolve())

    def get_run_dir(self, input_file: Path) -> Path:
        """获取单次运行的输出目录（按输入文件名区分）"""
        return self.output_dir / input_file.stem


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    _config = RuntimeConfig.from_yaml(yaml_path or DEFAULT_CONFIG_PATH)
    return _config
