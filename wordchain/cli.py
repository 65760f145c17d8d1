#!/usr/bin/env python3
"""
wordchain CLI
=============
Command-line interface for training chains and generating text.

Usage:
    wordchain generate alice.txt -k 2 -n 60 -c 3
    wordchain train posts/ -o model.json
    wordchain stats --model model.json --top 15
"""

import argparse
import json
import logging
import sys

from wordchain import __version__

logger = logging.getLogger(__name__)

# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def print(self, *args, **kwargs):
        if not self.quiet:
            print(*args, **kwargs)

    def result(self, text: str):
        """Command results print even in quiet mode."""
        print(text)

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def success(self, msg: str):
        if not self.quiet:
            print(f"OK: {msg}")


def configure_logging(verbose: bool = False):
    from wordchain.settings import get_setting

    cfg = get_setting("logging", {}) or {}
    level = logging.DEBUG if verbose else getattr(
        logging, str(cfg.get("level", "WARNING")).upper(), logging.WARNING
    )
    logging.basicConfig(
        level=level,
        format=cfg.get("format", "%(asctime)s [%(levelname)s] %(name)s: %(message)s"),
        datefmt=cfg.get("datefmt", "%H:%M:%S"),
    )


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def load_chain(args):
    """Load a saved model (--model) or train one from corpus paths."""
    from wordchain.chain import ChainModel, load_model
    from wordchain.corpus import read_corpus

    if getattr(args, 'model', None):
        if args.paths:
            raise ValueError("Pass either corpus paths or --model, not both")
        model = load_model(args.model)
        if args.prefix_length is not None and args.prefix_length != model.prefix_length:
            logger.warning(
                f"Ignoring --prefix-length {args.prefix_length}; "
                f"model was trained with {model.prefix_length}"
            )
        return model

    if not args.paths:
        raise ValueError("No corpus given (pass files, directories, '-' or --model)")

    text = read_corpus(args.paths, encoding=args.encoding)
    return ChainModel.from_text(text, prefix_length=args.prefix_length)


# =============================================================================
# Commands
# =============================================================================

def cmd_generate(args, out: Output):
    """Generate passages."""
    from wordchain.chain import ChainGenerator, NoSeedError

    model = load_chain(args)
    if not model.seed_keys:
        raise NoSeedError("No prefix starts with an uppercase letter")

    generator = ChainGenerator(model, seed=args.seed)

    passages = generator.generate_batch(args.count, max_words=args.max_words)

    if args.pretty:
        from wordchain.ui import render_passages
        render_passages(passages)
    else:
        for i, text in enumerate(passages):
            if i:
                out.print()
            out.result(text)

    return 0


def cmd_train(args, out: Output):
    """Train a chain and save it as JSON."""
    from wordchain.chain import save_model

    model = load_chain(args)
    save_model(model, args.output)
    out.success(f"Saved {len(model)} prefixes (prefix length {model.prefix_length}) to {args.output}")
    return 0


def cmd_stats(args, out: Output):
    """Show chain statistics."""
    from wordchain.settings import get_setting

    model = load_chain(args)
    top = args.top if args.top is not None else get_setting("ui.top_prefixes", 10)
    stats = model.stats(top=top)

    if args.json:
        out.result(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))
        return 0

    from wordchain.ui import render_stats
    render_stats(stats)
    return 0


# =============================================================================
# Main
# =============================================================================

def add_corpus_arguments(p: argparse.ArgumentParser):
    p.add_argument('paths', nargs='*', help="Corpus files or directories ('-' for stdin)")
    p.add_argument('--prefix-length', '-k', type=positive_int,
                   help='Words per prefix (default: from app.yaml)')
    p.add_argument('--encoding', '-e', help='Corpus text encoding (default: from app.yaml)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wordchain',
        description='wordchain - Markov chain prose generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate alice.txt -k 2 -n 60
  %(prog)s generate posts/ -c 5 --seed 42 --pretty
  %(prog)s train posts/ -k 3 -o model.json
  %(prog)s generate --model model.json -n 40
  %(prog)s stats --model model.json --top 15
"""
    )

    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # --- generate ---
    p = subparsers.add_parser('generate', aliases=['gen', 'g'], help='Generate text')
    add_corpus_arguments(p)
    p.add_argument('--model', '-m', help='Load a saved model instead of training')
    p.add_argument('-n', '--max-words', type=non_negative_int,
                   help='Max words after the seed (default: from app.yaml)')
    p.add_argument('-c', '--count', type=positive_int, default=1,
                   help='Number of passages (default: 1)')
    p.add_argument('--seed', '-s', type=int, help='Random seed for reproducible output')
    p.add_argument('--pretty', '-p', action='store_true', help='Render passages in panels')

    # --- train ---
    p = subparsers.add_parser('train', aliases=['t'], help='Train a chain and save it')
    add_corpus_arguments(p)
    p.add_argument('--output', '-o', required=True, help='Output JSON file')

    # --- stats ---
    p = subparsers.add_parser('stats', help='Show chain statistics')
    add_corpus_arguments(p)
    p.add_argument('--model', '-m', help='Load a saved model instead of training')
    p.add_argument('--top', type=non_negative_int, help='Top prefixes to list (default: from app.yaml)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Handle aliases
    cmd_map = {
        'gen': 'generate', 'g': 'generate',
        't': 'train',
    }
    command = cmd_map.get(args.command, args.command)

    configure_logging(verbose=args.verbose)
    out = Output(quiet=args.quiet)

    commands = {
        'generate': cmd_generate,
        'train': cmd_train,
        'stats': cmd_stats,
    }

    handler = commands.get(command)
    if handler:
        from wordchain.chain import NoSeedError

        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except NoSeedError as e:
            out.error(f"No seed available: {e}")
            return 1
        except (ValueError, OSError, LookupError) as e:
            out.error(str(e))
            if args.verbose:
                import traceback
                traceback.print_exc()
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
