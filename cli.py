#!/usr/bin/env python3
"""Simple CLI for querying the meta-aggregator locally"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from metaswap.core.aggregator import MetaAggregator
from metaswap.core.errors import SwapperError
from metaswap.core.formatting import shorten_address, swap_request_to_string
from metaswap.core.models import StatusQuery, SwapRequest, TransactionRequestWithEstimate
from metaswap.logging_config import setup_logging


def print_route(rank: int, tr: TransactionRequestWithEstimate) -> None:
    provider = tr.provider_id.value if tr.provider_id else "?"
    print(
        f"{rank:2d}. {provider:<10} out={tr.estimated_output:<16g} rate={tr.estimated_exchange_rate:<14g} "
        f"gas=${tr.total_gas_cost_usd:,.2f} to={shorten_address(tr.to or '')}"
    )
    if tr.approval_address:
        print(f"    approve: {tr.approval_address}")


async def cli_quote(req: SwapRequest, show_all: bool, as_json: bool) -> int:
    aggregator = MetaAggregator()
    print(f"Quoting {swap_request_to_string(req)}...")
    try:
        routes = await aggregator.get_all_transaction_requests(req)
    except SwapperError as e:
        print(f"Error: {e.message}")
        return 2

    if not routes:
        print("No viable route found")
        return 1

    shown = routes if show_all else routes[:1]
    if as_json:
        print(json.dumps([tr.to_dict() for tr in shown], indent=2, default=str))
        return 0

    for i, tr in enumerate(shown, 1):
        print_route(i, tr)
    best = routes[0]
    print(f"\n{swap_request_to_string(req, best.data)}")
    return 0


async def cli_status(query: StatusQuery) -> int:
    aggregator = MetaAggregator()
    status = await aggregator.get_status(query)
    if status is None:
        print(f"No status found for {query.transaction_id}")
        return 1
    print(json.dumps(status.to_dict(), indent=2))
    return 0


def _providers(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [p.strip() for p in value.split(",") if p.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Metaswap CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--provider-log-level", default=None, help="Override PROVIDER_LOG_LEVEL for adapter logs")
    subparsers = parser.add_subparsers(dest="command")

    quote_parser = subparsers.add_parser("quote", help="Best route for a swap or bridge")
    quote_parser.add_argument("input", help="Input token address")
    quote_parser.add_argument("output", help="Output token address")
    quote_parser.add_argument("amount_wei", help="Input amount in smallest units")
    quote_parser.add_argument("--payer", required=True, help="Address paying for the swap")
    quote_parser.add_argument("--chain", type=int, default=1, help="Input chain id (default: 1)")
    quote_parser.add_argument("--to-chain", type=int, default=None, help="Output chain id for bridging")
    quote_parser.add_argument("--receiver", default=None)
    quote_parser.add_argument("--test-payer", default=None, help="Impersonated payer for simulation")
    quote_parser.add_argument("--slippage", type=int, default=None, help="Max slippage in bps")
    quote_parser.add_argument("--providers", default=None, help="Comma-separated ids, e.g. LIFI,SQUID")
    quote_parser.add_argument("--input-decimals", type=int, default=None)
    quote_parser.add_argument("--output-decimals", type=int, default=None)
    quote_parser.add_argument("--all", action="store_true", help="Print every route, best first")
    quote_parser.add_argument("--json", action="store_true", help="Print transaction requests as JSON")

    status_parser = subparsers.add_parser("status", help="Cross-chain transfer status")
    status_parser.add_argument("transaction_id", help="Source tx hash or provider transfer id")
    status_parser.add_argument("--from-chain", type=int, default=None)
    status_parser.add_argument("--to-chain", type=int, default=None)
    status_parser.add_argument("--bridge", default=None)
    status_parser.add_argument("--providers", default=None, help="Comma-separated ids")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level, args.provider_log_level)

    if args.command == "quote":
        req = SwapRequest(
            input=args.input,
            input_chain_id=args.chain,
            output=args.output,
            output_chain_id=args.to_chain,
            amount_wei=args.amount_wei,
            payer=args.payer,
            receiver=args.receiver,
            test_payer=args.test_payer,
            max_slippage=args.slippage,
            provider_ids=_providers(args.providers),
            input_decimals=args.input_decimals,
            output_decimals=args.output_decimals,
        )
        return await cli_quote(req, args.all, args.json)

    query = StatusQuery(
        transaction_id=args.transaction_id,
        from_chain_id=args.from_chain,
        to_chain_id=args.to_chain,
        bridge=args.bridge,
        provider_ids=_providers(args.providers),
    )
    return await cli_status(query)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
