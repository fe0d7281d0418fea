#!/usr/bin/env python3
"""Simple CLI for exercising DefiPilot locally"""

import argparse
import asyncio
import json

from defipilot.config import settings
from defipilot.core.execution import TransactionBuildError, build_transaction_params
from defipilot.core.routing import DEFAULT_PROTOCOL, DEFAULT_STRATEGY, classify
from defipilot.services import AppServices
from defipilot.types import StrategyAction


def cli_classify(query: str):
    """Print the routing decision for a query"""
    decision = classify(query)
    print(json.dumps(decision.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))


def cli_build(args):
    """Print transaction descriptors for a deposit or withdraw"""
    action = StrategyAction(
        action=args.action,
        amount=args.amount,
        protocol=args.protocol,
        strategy=args.strategy,
        position_id=args.position_id,
    )
    try:
        transactions = build_transaction_params(action)
    except TransactionBuildError as e:
        print(f"❌ {e.message}")
        return

    for i, tx in enumerate(transactions, 1):
        print(f"{i}. {tx.description}")
        print(f"   to:    {tx.to}")
        print(f"   data:  {tx.data}")
        print(f"   value: {tx.value}")


async def cli_query(query: str):
    """Run one query through the full pipeline, agent included when configured"""
    services = AppServices.from_settings(settings)
    await services.initialize_agent()
    if not services.agent_ready:
        print("⚠️  Agent unavailable, answering with fallbacks only")

    result = await services.pipeline.handle(query, "cli")
    print(f"\n🤖 {result.response}")
    for tx in result.transactions or []:
        print(f"   • {tx.description} -> {tx.to}")
    if result.requires_approval:
        print("\n⏳ Requires approval")


def cli_serve(host: str, port: int):
    import uvicorn
    uvicorn.run("defipilot.main:app", host=host, port=port, log_level=settings.log_level.lower())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DefiPilot CLI")
    subparsers = parser.add_subparsers(dest="command")

    classify_parser = subparsers.add_parser("classify", help="Show how a query is routed")
    classify_parser.add_argument("query", help="Chat query")

    build_parser_ = subparsers.add_parser("build", help="Build vault transactions")
    build_parser_.add_argument("action", choices=["deposit", "withdraw"], help="Vault action")
    build_parser_.add_argument("--amount", help="Amount in USDC (deposit)")
    build_parser_.add_argument("--protocol", default=DEFAULT_PROTOCOL, help="Protocol label (deposit)")
    build_parser_.add_argument("--strategy", default=DEFAULT_STRATEGY, help="Strategy label (deposit)")
    build_parser_.add_argument("--position-id", type=int, help="Position id (withdraw)")

    query_parser = subparsers.add_parser("query", help="Answer a query in-process")
    query_parser.add_argument("query", help="Chat query")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "classify":
        cli_classify(args.query)

    elif args.command == "build":
        cli_build(args)

    elif args.command == "query":
        asyncio.run(cli_query(args.query))

    elif args.command == "serve":
        cli_serve(args.host, args.port)

    else:
        print(f"❌ Unknown command: {args.command}")
        parser.print_help()


if __name__ == "__main__":
    main()
