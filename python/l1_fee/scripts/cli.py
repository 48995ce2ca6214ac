#!/usr/bin/env python3
"""
Command-line interface for L1 data fee calculation.

Prices serialized transactions against either explicit fee parameters or
parameters read from a chain over JSON-RPC.
"""

import sys
import argparse
import logging

from ..core.config import L1FeeConfig
from ..core.fee_context import FeeContext, build_context, scale_decimals
from ..core.l1_cost import L1CostCalculator
from ..core.units import Wei, wei_to_eth
from ..data.loader import PayloadLoader, parse_payload
from ..data.rpc_client import EthereumRPCClient, RPCError
from ..data.state_readers import RPCParameterReader


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def parse_block(value: str):
    """Parse a --block value: a decimal or 0x number, or a tag such as 'latest'."""
    if value.isdigit():
        return int(value)
    if value.lower().startswith('0x'):
        return int(value, 16)
    return value


def resolve_context(args) -> FeeContext:
    """Build the fee context from RPC (--rpc-url) or explicit parameters."""
    if args.rpc_url:
        client = EthereumRPCClient(args.rpc_url, request_timeout=args.timeout)
        if args.block is None:
            reader = RPCParameterReader.at_latest_block(client)
        else:
            reader = RPCParameterReader(client, block=args.block)
        return build_context(L1FeeConfig.from_env(), reader)

    return FeeContext(
        base_fee=args.base_fee,
        overhead=args.overhead,
        scalar=scale_decimals(args.scalar, args.decimals),
    )


def cmd_cost(args):
    """Handle cost command."""
    context = resolve_context(args)
    calculator = L1CostCalculator(context)
    breakdown = calculator.breakdown(parse_payload(args.payload))

    if args.quiet:
        print(breakdown['l1_fee_wei'])
        return

    print(f"Zero bytes:     {breakdown['zero_bytes']}")
    print(f"Non-zero bytes: {breakdown['nonzero_bytes']}")
    print(f"L1 gas used:    {breakdown['l1_gas_used']:,}")
    print(f"L1 fee:         {breakdown['l1_fee_wei']:,} wei "
          f"({wei_to_eth(Wei(breakdown['l1_fee_wei'])):.9f} ETH)")


def cmd_context(args):
    """Handle context command."""
    context = resolve_context(args)
    print(context.summary())


def cmd_batch(args):
    """Handle batch command."""
    loader = PayloadLoader(resolve_context(args))
    df = loader.load_csv(args.input)
    loader.save_to_csv(df, args.output)

    stats = loader.get_statistics(df)
    print(f"✅ Priced {stats['count']} transactions, total L1 fee {stats['total_fee_wei']:,} wei")


def add_context_arguments(parser: argparse.ArgumentParser):
    """Arguments selecting where fee parameters come from."""
    group = parser.add_argument_group('fee parameters')
    group.add_argument('--rpc-url', action='append', help='RPC endpoint (repeat for failover)')
    group.add_argument('--block', type=parse_block, default=None,
                       help='Block number or tag for RPC reads (default: current head)')
    group.add_argument('--timeout', type=int, default=30, help='RPC request timeout in seconds')
    group.add_argument('--base-fee', type=int, default=0, help='L1 base fee in wei per gas')
    group.add_argument('--overhead', type=int, default=0, help='Fixed gas overhead per transaction')
    group.add_argument('--scalar', type=int, default=0, help='Raw fee scalar')
    group.add_argument('--decimals', type=int, default=0, help='Decimals of the raw scalar')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='l1-fee',
        description="L1 data fee tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s cost 0x02f8... --base-fee 30000000000 --overhead 2100 --scalar 1000000 --decimals 6
  %(prog)s cost 0x02f8... --rpc-url https://mainnet.optimism.io
  %(prog)s context --rpc-url https://mainnet.optimism.io --block 105235063
  %(prog)s batch txs.csv priced.csv --rpc-url https://mainnet.optimism.io
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Quiet output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Cost command
    cost_parser = subparsers.add_parser('cost', help='Price one serialized transaction')
    cost_parser.add_argument('payload', type=str, help='Serialized transaction as hex')
    add_context_arguments(cost_parser)

    # Context command
    context_parser = subparsers.add_parser('context', help='Show the fee parameters in effect')
    add_context_arguments(context_parser)

    # Batch command
    batch_parser = subparsers.add_parser('batch', help='Price a CSV of serialized transactions')
    batch_parser.add_argument('input', type=str, help='Input CSV with a payload column')
    batch_parser.add_argument('output', type=str, help='Output CSV path')
    add_context_arguments(batch_parser)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    try:
        if args.command == 'cost':
            cmd_cost(args)
        elif args.command == 'context':
            cmd_context(args)
        elif args.command == 'batch':
            cmd_batch(args)
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled")
        sys.exit(1)
    except (ValueError, OverflowError, RPCError, OSError) as e:
        logging.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
