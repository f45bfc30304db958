import argparse
import logging
import sys
from dataclasses import replace

from .config import load_parameters
from .errors import EstimatorError
from .estimator_main import run_estimator
from .parameters import DEFAULT_PARAMETERS

logger = logging.getLogger("soundness_estimator")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Estimate proof size and soundness of STIR, WHIR, FRI and Basefold"
    )
    parser.add_argument(
        "--protocol",
        choices=["stir", "whir", "fri", "basefold", "all"],
        default=None,
        help="Protocol to estimate (default: all)",
    )
    parser.add_argument("--config", default=None, help="YAML file overriding the defaults")
    parser.add_argument("--field", default=None, help="Field preset, e.g. goldilocks-2")
    parser.add_argument("--log-degree", type=int, default=None)
    parser.add_argument("--log-rate", type=int, default=None, help="rate = 2^-log_rate")
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument(
        "--assumption",
        default=None,
        help="UniqueDecoding, JohnsonBound or CapacityBound",
    )
    parser.add_argument("--security-level", type=int, default=None)
    parser.add_argument("--pow-bits", type=int, default=None)
    parser.add_argument("--folding-factor", type=int, default=None)
    parser.add_argument(
        "--build",
        action="store_true",
        default=False,
        help="Search for the smallest configuration instead of folding by a fixed factor",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        demo = load_parameters(args.config) if args.config else DEFAULT_PARAMETERS
        overrides = {
            name: value
            for name, value in (
                ("field", args.field),
                ("log_degree", args.log_degree),
                ("log_rate", args.log_rate),
                ("batch_size", args.batch_size),
                ("assumption", args.assumption),
                ("security_level", args.security_level),
                ("pow_bits", args.pow_bits),
                ("folding_factor", args.folding_factor),
            )
            if value is not None
        }
        if args.protocol is not None and args.protocol != "all":
            overrides["protocols"] = (args.protocol,)
        demo = replace(demo, **overrides)

        for report in run_estimator(demo, build=args.build):
            print(report)
            print()
    except EstimatorError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
