"""
命令行入口

用法：
    cadgrid export drawing.dxf --reference-block GRID --out output/
    cadgrid explode drawing.dxf --out drawing_flattened.dxf
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError

from .cad import ArrayExploder, EzdxfDrawingSource
from .config import RuntimeConfig, reload_config
from .interfaces import CadGridError
from .pipeline import PipelineExecutor, create_run

logger = logging.getLogger("cadgrid")


def setup_logging(config: RuntimeConfig, log_dir: Path | None = None) -> None:
    """按运行期配置初始化根日志"""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.logging.log_to_file and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / config.logging.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=config.logging.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def _apply_overrides(config: RuntimeConfig, args: argparse.Namespace) -> None:
    """命令行参数覆盖配置文件"""
    if args.reference_block:
        config.grid.reference_block = args.reference_block
    if args.reference_handle:
        config.grid.reference_handle = args.reference_handle
    if args.cell_width is not None:
        config.grid.cell_width = args.cell_width
    if args.cell_height is not None:
        config.grid.cell_height = args.cell_height
    if args.columns is not None:
        config.grid.columns = args.columns
    if args.label_layer:
        config.layers.label_layer = args.label_layer
    if args.contour_layer:
        config.layers.contour_layers = list(args.contour_layer)
    if args.no_explode:
        config.flatten.enabled = False
    if args.format:
        config.export.output_format = args.format


def _load_config(args: argparse.Namespace) -> RuntimeConfig:
    return reload_config(args.config) if args.config else reload_config()


def _report_invalid(input_file: Path, exc: ValidationError) -> int:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    print(f"{input_file.name}: ERROR 参数无效 {field}: {error['msg']}")
    return 1


def _cmd_export(args: argparse.Namespace) -> int:
    input_file = Path(args.input)
    try:
        config = _load_config(args)
        _apply_overrides(config, args)
    except ValidationError as exc:
        return _report_invalid(input_file, exc)

    run = create_run(input_file, Path(args.out) if args.out else None)
    setup_logging(config, run.output_dir)

    try:
        PipelineExecutor(config).execute(run)
    except CadGridError as exc:
        print(f"{input_file.name}: ERROR {exc}")
        return 1

    report = run.grid_report
    exploded = run.explode_report.exploded if run.explode_report else 0
    print(
        f"{input_file.name}: arrays_exploded={exploded} "
        f"cells={report.cells_processed} exported={report.cells_exported} "
        f"empty={report.cells_empty} failed={report.cells_failed}"
    )
    return 0


def _cmd_explode(args: argparse.Namespace) -> int:
    input_file = Path(args.input)
    try:
        config = _load_config(args)
    except ValidationError as exc:
        return _report_invalid(input_file, exc)
    setup_logging(config)

    out_file = Path(args.out) if args.out else input_file.with_name(
        f"{input_file.stem}_flattened.dxf"
    )

    try:
        source = EzdxfDrawingSource.from_file(input_file)
    except CadGridError as exc:
        print(f"{input_file.name}: ERROR {exc}")
        return 1

    exploder = ArrayExploder(source, max_depth=config.flatten.max_depth)
    report = exploder.explode_arrays(source.enumerate_entities("Model"))
    source.save(out_file)
    print(
        f"{input_file.name}: arrays={report.arrays_found} exploded={report.exploded} "
        f"failed={report.failed} -> {out_file}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadgrid",
        description="Explode associative arrays and export grid cells of a DXF drawing.",
    )
    parser.add_argument("--config", default="", help="运行期配置YAML（默认：config/cadgrid.yaml）")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="炸开阵列并按网格单元导出轮廓")
    export.add_argument("input", help="输入DXF/DWG文件")
    export.add_argument("--out", default="", help="输出目录（默认：output/<文件名>）")
    export.add_argument("--reference-block", default="", help="网格基准块名")
    export.add_argument("--reference-handle", default="", help="网格基准块句柄（优先于块名）")
    export.add_argument("--cell-width", type=float, default=None, help="单元宽度")
    export.add_argument("--cell-height", type=float, default=None, help="单元高度")
    export.add_argument("--columns", type=int, default=None, help="列数")
    export.add_argument("--label-layer", default="", help="标签图层（默认：P_Names）")
    export.add_argument(
        "--contour-layer",
        action="append",
        default=[],
        help="轮廓图层，可重复指定（默认：全部非文本实体）",
    )
    export.add_argument("--no-explode", action="store_true", help="跳过阵列炸开")
    export.add_argument("--format", choices=["dxf", "dwg"], default=None, help="单元输出格式")
    export.set_defaults(func=_cmd_export)

    explode = sub.add_parser("explode", help="仅炸开关联阵列并另存")
    explode.add_argument("input", help="输入DXF/DWG文件")
    explode.add_argument("--out", default="", help="输出DXF（默认：<文件名>_flattened.dxf）")
    explode.set_defaults(func=_cmd_explode)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
