"""
Command line entry points for the grid client.

``watch`` renders confirmed events into a PNG; ``paint`` buffers edits,
connects a wallet and flushes them once.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import random
import sys
from typing import List, Optional, Sequence, Tuple

from megagrid import __version__
from megagrid.client import ColorMode, FlushStatus, ReconciliationEngine, StatusIndicator
from megagrid.codec import format_color, parse_hex_color
from megagrid.config import GridClientConfig, load_grid_client_config
from megagrid.rendering import RasterSurface
from megagrid.transport import GridNodeClient, RpcChannel, RpcWalletProvider


logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='[%(asctime)s] %(name)s - %(levelname)s - %(message)s',
    )
    if os.getenv('MEGAGRID_DEBUG', '').lower() in ('1', 'true', 'yes'):
        debug = True
    if debug:
        logging.getLogger('megagrid').setLevel(logging.DEBUG)
        # Keep websockets quiet unless explicitly enabled
        if os.environ.get('MEGAGRID_WEBSOCKETS_DEBUG', '').lower() not in ('1', 'true', 'yes', 'on'):
            logging.getLogger('websockets').setLevel(logging.INFO)


def parse_cell_spec(text: str) -> Tuple[int, Optional[int]]:
    """``ID`` or ``ID:#RRGGBB``; a missing color means "use the color mode"."""

    cell, _, color = text.partition(':')
    try:
        cell_id = int(cell, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid cell id in {text!r}") from exc
    if not color:
        return cell_id, None
    try:
        return cell_id, parse_hex_color(color)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid color in {text!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='megagrid', description='Collaborative grid painting client')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--node-url', help='WebSocket URL of the grid node (MEGAGRID_WS_URL)')
    parser.add_argument('--wallet-url', help='WebSocket URL of the wallet provider (MEGAGRID_WALLET_URL)')
    parser.add_argument('--chain-id', type=lambda v: int(v, 0), help='Target network id (MEGAGRID_CHAIN_ID)')
    parser.add_argument('--grid-address', help='Grid resource address (MEGAGRID_GRID_ADDRESS)')
    parser.add_argument('--cell-px', type=int, help='Cell size in pixels, clamped to [2, 20]')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    watch = sub.add_parser('watch', help='Render confirmed events and save a PNG')
    watch.add_argument('--seconds', type=float, default=30.0, help='How long to listen')
    watch.add_argument('--output', default='grid.png', help='PNG output path')

    paint = sub.add_parser('paint', help='Buffer edits, connect a wallet and flush once')
    paint.add_argument('--cell', action='append', type=parse_cell_spec, default=[], metavar='ID[:#RRGGBB]')
    paint.add_argument('--random', type=int, default=0, metavar='K', help='Also edit K random cells')
    paint.add_argument('--color', type=parse_hex_color, help='Picker color for cells without one')
    paint.add_argument('--seed', type=int, help='Seed for random cells and colors')
    return parser


def config_from_args(args: argparse.Namespace) -> GridClientConfig:
    return load_grid_client_config().with_overrides(
        node_ws_url=args.node_url,
        wallet_ws_url=args.wallet_url,
        chain_id=args.chain_id,
        grid_address=args.grid_address,
        cell_px=args.cell_px,
    )


def build_engine(
    config: GridClientConfig,
    *,
    with_wallet: bool,
    rng: Optional[random.Random] = None,
) -> Tuple[ReconciliationEngine, RasterSurface, List[RpcChannel]]:
    channels: List[RpcChannel] = []
    node_channel = RpcChannel(config.node_ws_url, name='node')
    channels.append(node_channel)
    node = GridNodeClient(node_channel, config.grid_address)

    wallet = None
    if with_wallet and config.wallet_ws_url:
        wallet_channel = RpcChannel(config.wallet_ws_url, name='wallet')
        channels.append(wallet_channel)
        wallet = RpcWalletProvider(wallet_channel, config.grid_address)

    status = StatusIndicator()
    status.subscribe(lambda text: print(text, file=sys.stderr))
    surface = RasterSurface(config.cell_px)
    engine = ReconciliationEngine(
        surface,
        config.network_descriptor(),
        reader=node,
        events=node,
        wallet=wallet,
        rng=rng,
        status=status,
    )
    return engine, surface, channels


async def _close_all(channels: Sequence[RpcChannel]) -> None:
    for channel in channels:
        await channel.close()


async def run_watch(config: GridClientConfig, seconds: float, output: str) -> int:
    engine, surface, channels = build_engine(config, with_wallet=False)
    try:
        await engine.start()
        stop = asyncio.Event()
        asyncio.get_running_loop().call_later(max(0.0, seconds), stop.set)
        await engine.run_ingest(stop)
        engine.drain_events()
        surface.save_png(output)
    finally:
        await _close_all(channels)
    return 0


async def run_paint(config: GridClientConfig, args: argparse.Namespace) -> int:
    rng = random.Random(args.seed) if args.seed is not None else random.Random()
    engine, _surface, channels = build_engine(config, with_wallet=True, rng=rng)
    try:
        await engine.start()
        if args.color is not None:
            engine.color_mode = ColorMode.PICKER
            engine.picker_color = args.color
        for cell_id, color in args.cell:
            engine.local_edit(cell_id, color if color is not None else engine.next_color())
        for _ in range(max(0, args.random)):
            engine.local_edit(rng.randrange(engine.session.cell_count), engine.next_color())
        logger.info("Pending edits: %s", engine.describe_pending() or "none")

        connected = await engine.connect()
        if not connected.connected:
            return 2
        result = await engine.flush()
        if result.status is FlushStatus.SUBMITTED:
            print(result.tx_hash or '')
        elif result.status is FlushStatus.FAILED:
            pending = engine.buffer.as_dict()
            logger.error(
                "Flush failed; %d edit(s) still pending: %s",
                len(pending),
                ", ".join(f"{k}={format_color(v)}" for k, v in pending.items()),
            )
        return 0 if result.ok else 1
    finally:
        await _close_all(channels)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)
    config = config_from_args(args)
    if not config.grid_address:
        parser.error('a grid address is required (--grid-address or MEGAGRID_GRID_ADDRESS)')

    if args.command == 'watch':
        return asyncio.run(run_watch(config, args.seconds, args.output))
    return asyncio.run(run_paint(config, args))


__all__ = ["build_engine", "build_parser", "main", "parse_cell_spec"]
