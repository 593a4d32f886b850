"""
ODA 转换器 - DWG↔DXF 转换

职责：
- 调用 ODA File Converter 执行格式转换（DWG输入读取 / 单元DWG输出）
- 处理超时和错误

测试要点：
- test_dwg_to_dxf_success: 正常转换
- test_conversion_timeout: 超时处理
- test_missing_executable: 可执行文件不存在
- test_dxf_to_dwg_uses_output_version: 反向转换

依赖：
- ODA File Converter 可执行文件（路径由运行期配置指定）
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..config import get_config
from ..interfaces import ConversionError


class ODAConverter:
    """ODA File Converter 封装"""

    def __init__(
        self,
        exe_path: str | None = None,
        timeout: int | None = None,
        output_version: str | None = None,
    ):
        config = get_config()
        self.exe_path = Path(exe_path or config.oda.exe_path)
        self.timeout = timeout or config.timeouts.oda_convert_sec
        self.output_version = output_version or config.oda.output_version
        self.work_dir = Path(config.oda.work_dir) if config.oda.work_dir else None

    @property
    def available(self) -> bool:
        return bool(str(self.exe_path)) and self.exe_path.is_file()

    def dwg_to_dxf(self, dwg_path: Path, output_dir: Path) -> Path:
        """DWG 转 DXF"""
        return self._convert(dwg_path, output_dir, "DXF", ".dxf")

    def dxf_to_dwg(self, dxf_path: Path, output_dir: Path) -> Path:
        """DXF 转 DWG"""
        return self._convert(dxf_path, output_dir, "DWG", ".dwg")

    def _convert(self, src: Path, output_dir: Path, out_type: str, suffix: str) -> Path:
        if not src.exists():
            raise ConversionError(f"输入文件不存在: {src}")
        if not self.available:
            raise ConversionError(f"ODA可执行文件不存在: {self.exe_path}")
        if self.work_dir:
            self.work_dir.mkdir(parents=True, exist_ok=True)

        output_dir.mkdir(parents=True, exist_ok=True)

        # ODA按目录+过滤器批量转换，过滤器限定为单个文件
        cmd = [
            str(self.exe_path),
            str(src.parent),
            str(output_dir),
            self.output_version,
            out_type,
            "0",  # Recursive
            "1",  # Audit
            src.name,
        ]

        try:
            subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
                cwd=str(self.work_dir) if self.work_dir else None,
            )
        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"ODA转换超时: {src}") from e
        except subprocess.CalledProcessError as e:
            detail = e.stderr or e.stdout or ""
            raise ConversionError(f"ODA转换失败: {detail}") from e

        return self._resolve_output(output_dir, src.stem, suffix)

    @staticmethod
    def _resolve_output(output_dir: Path, stem: str, suffix: str) -> Path:
        expected = output_dir / f"{stem}{suffix}"
        if expected.exists():
            return expected
        for candidate in output_dir.glob(f"{stem}.*"):
            if candidate.suffix.lower() == suffix:
                return candidate
        raise ConversionError(f"转换后文件不存在: {expected}")
