"""旧版交易 JSON 导入 CLI。

用法：
    # 干跑：只检查
    python -m tradenavi.cli.import_trades --json data/trades.json --mode dry-run

    # 实际导入
    python -m tradenavi.cli.import_trades --json data/trades.json --mode apply
"""

from __future__ import annotations

import argparse
import sys

from tradenavi.core.config import load_env
from tradenavi.core.log import log
from tradenavi.flows.trade_import import ImportResult, import_trades_from_json


def _parse_args() -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(
        prog="python -m tradenavi.cli.import_trades",
        description="从旧版 JSON 导入交易记录",
    )
    parser.add_argument("--json", required=True, help="JSON 文件路径")
    parser.add_argument(
        "--mode",
        choices=["dry-run", "apply"],
        default="dry-run",
        help="导入模式：dry-run=只检查（默认），apply=实际写入",
    )
    return parser.parse_args()


def _format_result(result: ImportResult, mode: str) -> None:
    """格式化并输出导入结果。"""
    log("✅ 检查完成" if mode == "dry-run" else "✅ 导入完成")
    log(f"   总计: {result.total} 笔")
    log(f"   {'可导入' if mode == 'dry-run' else '成功'}: {result.succeeded} 笔")
    log(f"   失败: {result.failed} 笔")
    log(f"   跳过: {result.skipped} 笔")

    if result.error_summary:
        log("")
        log("📊 错误分类统计:")
        for error_type, count in sorted(result.error_summary.items()):
            log(f"   [{error_type}]: {count} 笔")

    # 每类只显示前 3 条
    shown: dict[str, int] = {}
    for failure in result.errors:
        shown[failure.error_type] = shown.get(failure.error_type, 0) + 1
        if shown[failure.error_type] <= 3:
            log(f"     • #{failure.index} {failure.trade_id or '-'}: {failure.message}")


def _do_import(args: argparse.Namespace) -> int:
    """执行导入命令。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    try:
        mode = "dry_run" if args.mode == "dry-run" else "apply"
        log(f"📥 交易导入（{args.mode} 模式）：{args.json}")
        result = import_trades_from_json(json_path=args.json, mode=mode)
        _format_result(result, args.mode)
        return 0
    except FileNotFoundError as err:
        log(f"❌ 文件不存在：{err}")
        return 4
    except ValueError as err:
        log(f"❌ 参数错误：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 导入失败：{err}")
        return 5


def main() -> int:
    load_env()
    return _do_import(_parse_args())


if __name__ == "__main__":
    sys.exit(main())
