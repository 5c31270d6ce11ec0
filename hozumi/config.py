"""Command line options turned into one immutable writer configuration."""

import argparse
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from hozumi import PROGRAM_NAME, __version__
from hozumi import timing

DEFAULT_CONTENT = 'ほずみ'

USAGE = """
Hozumi Command

USAGE:
  hozumi [option] param1 param2 param3...

VERSION:
  {version}

OPTIONS:
  -h, --help                            He displays help message.
  -v, --version                         He displays his version.
  -s, --speed {{low|middle|high}}         He displays by specified speed.
  -c, --cool                            He sometimes shouts, "Cool".
  -g, --graphical                       He dances. (Scrolling mode only)
  -f, --fixed                           He writes on a fixed screen.
  -p, --parallel                        He displays in parallel. (Implies --fixed)
      --log-file PATH                   He keeps a diary there.
"""


@dataclass(frozen=True)
class WriterConfig:
    contents: Tuple[str, ...]
    timing: timing.TimingProfile
    cool: bool = False
    graphical: bool = False
    parallel: bool = False
    fixed: bool = False
    log_file: Optional[str] = None

    @property
    def band_height(self):
        """Rows written per pass: one per content string, plus the shout."""
        return len(self.contents) + (1 if self.cool else 0)


class UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    # argparse would print its own message and exit 2
    def error(self, message):
        raise UsageError(message)


def usage_text():
    return USAGE.format(version=__version__)


def version_text():
    return f"{PROGRAM_NAME} version ({__version__})"


def build_parser():
    parser = _Parser(prog='hozumi', add_help=False)
    parser.add_argument('-h', '--help', action='store_true')
    parser.add_argument('-v', '--version', action='store_true')
    parser.add_argument('-s', '--speed', default=timing.DEFAULT_TIER)
    parser.add_argument('-c', '--cool', action='store_true')
    parser.add_argument('-g', '--graphical', action='store_true')
    parser.add_argument('-f', '--fixed', action='store_true')
    parser.add_argument('-p', '--parallel', action='store_true')
    parser.add_argument('--log-file', default=None)
    parser.add_argument('contents', nargs='*')
    return parser


def _exit_with_usage(out, status):
    out.write(usage_text())
    out.flush()
    sys.exit(status)


def resolve_config(argv=None, out=None):
    """Parse argv into a WriterConfig.

    Help and version print to `out` and exit 0. Every user-input error
    (unknown flag, bad speed tier, graphical combined with a text-only
    or fixed-grid flag) prints the usage text and exits 1.
    """
    out = out or sys.stdout
    try:
        opts = build_parser().parse_intermixed_args(argv)
    except UsageError:
        _exit_with_usage(out, 1)

    if opts.help:
        _exit_with_usage(out, 0)

    if opts.version:
        out.write(version_text() + '\n')
        out.flush()
        sys.exit(0)

    try:
        profile = timing.resolve(opts.speed)
    except timing.InvalidTier:
        _exit_with_usage(out, 1)

    fixed = opts.fixed or opts.parallel
    if opts.graphical and (opts.cool or fixed):
        _exit_with_usage(out, 1)

    contents = tuple(opts.contents) if opts.contents else (DEFAULT_CONTENT,)
    return WriterConfig(
        contents=contents,
        timing=profile,
        cool=opts.cool,
        graphical=opts.graphical,
        parallel=opts.parallel,
        fixed=fixed,
        log_file=opts.log_file,
    )
