"""Command-line interface for ticketfee."""

import sys
import json
import argparse
import logging
from .config import Config
from .advisor import TicketFeeAdvisor
from .amount import to_coins
from .logging import setup_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimate the fee to attach to a ticket purchase from "
                    "recent block and difficulty window fee statistics."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search for config.yaml)"
    )
    parser.add_argument(
        "--median",
        action="store_true",
        help="Use median fees instead of the configured fee source"
    )
    parser.add_argument(
        "--blocks",
        type=int,
        default=None,
        help="Number of recent blocks to average (overrides fees.blocks_to_avg)"
    )
    parser.add_argument(
        "--difficulty",
        type=int,
        default=None,
        help="Match difficulty windows against this stake difficulty (atoms), "
             "skipping the recent block average"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Pretty-print the JSON result"
    )
    return parser


def run(args: argparse.Namespace, advisor: TicketFeeAdvisor) -> dict:
    """Run one estimation according to parsed arguments."""
    if args.median:
        advisor.use_median = True
    if args.blocks is not None:
        advisor.blocks_to_avg = args.blocks

    if args.difficulty is not None:
        estimate = advisor.window_estimator.estimate(args.difficulty, advisor.use_median)
        result = {
            "fee": estimate.fee,
            "source": estimate.source,
            "has_signal": estimate.has_signal,
            "target_difficulty": args.difficulty,
            "use_median": advisor.use_median,
        }
    else:
        result = advisor.recommend()

    result["fee_coins"] = to_coins(result["fee"])
    return result


def main(argv=None):
    """Main CLI entrypoint."""
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
    except FileNotFoundError as e:
        # Logging is not configured until the config is loaded
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Config file not found: {e}")
        sys.exit(1)
    except Exception as e:
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Error loading config: {e}")
        sys.exit(1)

    setup_logging(config)

    try:
        result = run(args, TicketFeeAdvisor.from_config(config))
    except Exception as e:
        logger.error(f"Fee estimation failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(json.dumps(result, indent=2))
    else:
        print(json.dumps(result))
    logger.debug(f"Estimation completed: {json.dumps(result)}")


if __name__ == "__main__":
    main()
