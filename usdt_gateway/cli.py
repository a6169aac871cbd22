"""
命令行入口

示例：
    usdt-gateway init-db
    usdt-gateway wallet add TXyz...
    usdt-gateway reconcile          # 由 cron / systemd timer 定时调用
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import uvicorn

from usdt_gateway.core.config import get_settings
from usdt_gateway.core.container import get_container
from usdt_gateway.core.logging import configure_logging
from usdt_gateway.infrastructure.database.session import dispose_engine, get_session_factory, init_db
from usdt_gateway.modules.wallets import WalletError, WalletService


async def _init_db() -> int:
    await init_db()
    print("数据表已创建")
    return 0


async def _reconcile() -> int:
    service = get_container().reconciliation_service()
    report = await service.reconcile_all()
    print(
        f"钱包: {report.wallets_scanned}  失败: {len(report.failed_wallets)}  "
        f"新支付订单: {report.paid_count}"
    )
    for trade_id in report.paid_trade_ids:
        print(f"  已支付: {trade_id}")
    return 1 if report.failed_wallets else 0


async def _wallet(action: str, address: Optional[str]) -> int:
    async with get_session_factory()() as db:
        service = WalletService.with_session(db)
        if action == "list":
            for wallet in await service.list_wallets():
                state = "启用" if wallet.is_enabled else "禁用"
                print(f"{wallet.id:>4}  {wallet.address}  {state}")
            return 0

        assert address is not None
        try:
            if action == "add":
                wallet = await service.add_wallet(address)
            elif action == "enable":
                wallet = await service.enable(address)
            else:
                wallet = await service.disable(address)
        except (WalletError, ValueError) as exc:
            await db.rollback()
            print(f"操作失败: {exc}", file=sys.stderr)
            return 1
        await db.commit()
        print(f"{wallet.address}: {'启用' if wallet.is_enabled else '禁用'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="usdt-gateway", description="USDT-TRC20 收款网关工具")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="启动 HTTP 服务")
    sub.add_parser("init-db", help="创建数据表（开发环境，生产环境请使用 alembic）")
    sub.add_parser("reconcile", help="执行一次链上转账对账")

    wallet = sub.add_parser("wallet", help="管理收款钱包地址")
    wallet_sub = wallet.add_subparsers(dest="action", required=True)
    wallet_sub.add_parser("list", help="列出钱包地址")
    for action, help_text in (("add", "添加钱包地址"), ("enable", "启用钱包地址"), ("disable", "禁用钱包地址")):
        action_parser = wallet_sub.add_parser(action, help=help_text)
        action_parser.add_argument("address")

    return parser


async def _run(args: argparse.Namespace) -> int:
    try:
        if args.command == "init-db":
            return await _init_db()
        if args.command == "reconcile":
            return await _reconcile()
        return await _wallet(args.action, getattr(args, "address", None))
    finally:
        await dispose_engine()


def _serve() -> int:
    settings = get_settings()
    uvicorn.run(
        "usdt_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
        log_config=None,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings())
    if args.command == "serve":
        return _serve()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
