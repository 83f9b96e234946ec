import argparse
import logging
import random
import sys
from pathlib import Path

from tagfuzz import common, fuzzer, mutator, util


def _seed(args: argparse.Namespace) -> bytes:
    if args.seed_file:
        try:
            return args.seed_file.read_bytes()
        except OSError as e:
            sys.exit(f"Could not read seed file: {e}")
    return args.seed.encode("utf-8")


def _mutator(args: argparse.Namespace) -> mutator.Mutator:
    return mutator.Mutator(
        rand=random.Random(args.random_seed),  # noqa: S311
        nesting_depth=args.nesting_depth,
    )


def fuzz(args: argparse.Namespace) -> None:
    try:
        util.locate(args.command, args.working_dir)
    except common.ConfigurationError as e:
        sys.exit(str(e))

    f = fuzzer.Fuzzer(
        command=args.command,
        seed=_seed(args),
        working_dir=args.working_dir,
        timeout=args.timeout,
        mutator=_mutator(args),
    )
    try:
        f.start()
    except KeyboardInterrupt:
        sys.exit("\nUser cancellation. Exiting.\n")


def show(args: argparse.Namespace) -> None:
    for m in _mutator(args).generate(_seed(args)):
        logging.info("%s:\n%s\n", m.name, util.indent(m.data.decode(errors="backslashreplace")))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Mutation-based fuzzer for programs reading markup from standard input",
    )

    parser.add_argument(
        "--working-dir",
        type=Path,
        default=Path(),
        help="Directory to execute the command in (default: current directory).",
    )
    parser.add_argument(
        "--seed",
        type=str,
        default=mutator.DEFAULT_SEED.decode("utf-8"),
        help="Input to derive mutations from (default: %(default)s).",
    )
    parser.add_argument(
        "--seed-file",
        type=Path,
        help="File containing the input to derive mutations from (overrides --seed).",
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        help="Seed for the random number generator to make mutations reproducible.",
    )
    parser.add_argument(
        "--nesting-depth",
        type=int,
        default=20,
        help="Depth of generated nested elements (default: %(default)s).",
    )

    subparsers = parser.add_subparsers(dest="subcommands")

    parser_show = subparsers.add_parser(
        "show",
        help="Print all generated inputs and exit.",
    )
    parser_show.set_defaults(func=show)

    parser_fuzz = subparsers.add_parser(
        "fuzz",
        help="Run command on seed and all generated inputs.",
    )
    parser_fuzz.set_defaults(func=fuzz)

    parser_fuzz.add_argument(
        "--timeout",
        type=float,
        help="Kill the command after this many seconds (default: wait indefinitely).",
    )
    parser_fuzz.add_argument(
        "command",
        type=str,
        help="Command to fuzz, executed by the shell.",
    )

    args = parser.parse_args()

    if not args.subcommands:
        parser.exit(3)

    logging.basicConfig(format="[%(asctime)s] %(message)s", level=logging.INFO)
    args.func(args)


if __name__ == "__main__":
    main()
