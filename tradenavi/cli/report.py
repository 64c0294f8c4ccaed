"""待办日报生成与发送 CLI。"""

from __future__ import annotations

import argparse
import sys

from tradenavi.core.config import load_env
from tradenavi.core.log import log
from tradenavi.flows.report import make_todo_report, send_todo_report


def _parse_args() -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(
        prog="python -m tradenavi.cli.report",
        description="生成并发送待办日报（Discord）",
    )
    parser.add_argument("--user", required=True, help="报告对象用户 ID")
    parser.add_argument("--dry-run", action="store_true", help="只打印，不发送")
    return parser.parse_args()


def _do_report(args: argparse.Namespace) -> int:
    """执行日报命令。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    try:
        log(f"[Job:report] 开始：user={args.user}")
        if args.dry_run:
            log(make_todo_report(user_id=args.user))
        elif send_todo_report(user_id=args.user):
            log("✅ 日报发送成功")
        else:
            log("⚠️ 日报发送失败（可能未配置 Webhook）")
        log("[Job:report] 结束")
        return 0
    except ValueError as err:
        log(f"❌ 参数错误：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 执行失败：report - {err}")
        return 5


def main() -> int:
    load_env()
    return _do_report(_parse_args())


if __name__ == "__main__":
    sys.exit(main())
