# src/dria_fleet/cli.py
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from .core.exceptions import ConfigurationError, FleetError
from .core.logging_setup import setup_logging
from .core.settings import settings
from .fleet.controller import VERBS, FleetController
from .provisioning.pipeline import SetupOptions, SetupPipeline
from .wallets.provider import WalletProvider

logger = logging.getLogger("dria_fleet.cli")

MANAGE_USAGE = f"Usage: dria-fleet manage [{'|'.join(VERBS)}]"


def cmd_setup(args):
    opts = SetupOptions(
        api_key=args.api_key,
        generate_count=args.generate,
        wallet_file=args.wallet_file,
        nodes_per_wallet=args.nodes_per_wallet,
        nodes_dir=args.nodes_dir,
        skip_install=args.skip_install,
        skip_inference=args.skip_inference,
    )
    result = SetupPipeline(opts).run()
    print(f"{len(result.groups)} node group(s) configured under {args.nodes_dir or settings.nodes_dir}")
    return 0


def cmd_wallets_generate(args):
    wallets = WalletProvider().generate(args.count, output_path=args.output)
    for w in wallets:
        print(w.address)
    return 0


def cmd_wallets_check(args):
    wallets = WalletProvider().load(args.path)
    print(f"{args.path}: {len(wallets)} wallet(s) OK")
    return 0


def cmd_manage(args):
    controller = FleetController(nodes_dir=args.nodes_dir)
    try:
        report = controller.dispatch(args.verb)
    except ConfigurationError:
        print(MANAGE_USAGE, file=sys.stderr)
        return 2

    if report.empty:
        print("Nothing to do: no node groups found.", file=sys.stderr)
        return 1

    for r in report.failed:
        print(f"  {r.directory}: {r.error}", file=sys.stderr)
    if args.verb != "logs":
        print(f"All nodes attempted to {args.verb} "
              f"({len(report.succeeded)}/{len(report.results)} succeeded).")
    return 0


def build_parser():
    p = argparse.ArgumentParser("dria-fleet", description="Provision and manage Dria compute nodes")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--nodes-dir", type=Path, default=None,
                   help="Directory holding the node groups (default: DRIA_NODES_DIR or ~/dria-nodes)")
    sp = p.add_subparsers(dest="cmd")

    # setup
    s_setup = sp.add_parser("setup", help="Install dependencies, start inference, write node groups")
    s_setup.add_argument("--api-key", default=None, help="Vikey API key (or DRIA_VIKEY_API_KEY)")
    wallet_src = s_setup.add_mutually_exclusive_group()
    wallet_src.add_argument("--generate", metavar="N", default=None, help="Generate N new wallets")
    wallet_src.add_argument("--wallet-file", type=Path, default=None, help="Use an existing wallet JSON file")
    s_setup.add_argument("--nodes-per-wallet", default=None)
    s_setup.add_argument("--skip-install", action="store_true")
    s_setup.add_argument("--skip-inference", action="store_true")
    s_setup.set_defaults(func=cmd_setup)

    # wallets
    s_wallets = sp.add_parser("wallets", help="Wallet utilities")
    wsp = s_wallets.add_subparsers(dest="wallets_cmd")
    w_gen = wsp.add_parser("generate")
    w_gen.add_argument("count")
    w_gen.add_argument("--output", type=Path, default=None)
    w_gen.set_defaults(func=cmd_wallets_generate)
    w_check = wsp.add_parser("check")
    w_check.add_argument("path", type=Path)
    w_check.set_defaults(func=cmd_wallets_check)

    # manage
    s_manage = sp.add_parser("manage", help="start | restart | logs for every node group")
    s_manage.add_argument("verb", nargs="?", default=None)
    s_manage.set_defaults(func=cmd_manage)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    try:
        return args.func(args)
    except FleetError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
