from __future__ import annotations
import argparse, logging, sys

from pydantic import ValidationError

from .binary.reader import all_ok, process
from .models.config import (
    DEFAULT_INDENT_WIDTH,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_TERMS_PER_LINE,
    RenderConfig,
)

def _version() -> str:
    from importlib.metadata import PackageNotFoundError, version
    try:
        return version("ppbert")
    except PackageNotFoundError:
        return "unknown"

def cmd_print(args) -> int:
    config = args.config
    ok = True
    for name in args.files:
        res = process(name, config, name=name)
        if not res.ok:
            ok = False
            print(f"ppbert: {name}: {res.error}", file=sys.stderr)
            continue
        if res.text is not None:
            # One write per file so outputs never interleave.
            sys.stdout.write(res.text + "\n")
            sys.stdout.flush()
    return 0 if ok else 1

def build_parser():
    p = argparse.ArgumentParser(
        prog="ppbert",
        description="Pretty print structures encoded in Erlang's External Term Format",
    )
    p.add_argument("files", nargs="*", default=["-"], metavar="FILE",
                   help="BERT files to print; '-' or nothing reads stdin")
    p.add_argument("-i", "--indent-width", type=int, default=DEFAULT_INDENT_WIDTH,
                   help="Spaces per nesting level")
    p.add_argument("-m", "--max-terms-per-line", type=int, default=DEFAULT_MAX_TERMS_PER_LINE,
                   help="Basic terms a compound may hold and still print on one line")
    p.add_argument("-d", "--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                   help="Deepest nesting of compounds accepted before giving up")
    p.add_argument("-p", "--parse", action="store_true",
                   help="Decode only; print nothing for well-formed input")
    p.add_argument("-2", "--bert2", action="store_true",
                   help="Input is a stream of varint-framed terms")
    p.add_argument("-j", "--json", action="store_true",
                   help="Print the decoded term tree as JSON")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Report decode and render timings on stderr")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {_version()}")
    p.set_defaults(func=cmd_print)
    return p

def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        ns.config = RenderConfig(
            indent_width=ns.indent_width,
            max_terms_per_line=ns.max_terms_per_line,
            max_depth=ns.max_depth,
            skip_render=ns.parse,
            bert2=ns.bert2,
            as_json=ns.json,
        )
    except ValidationError as e:
        bad = ", ".join(
            f"--{str(err['loc'][0]).replace('_', '-')}: {err['msg']}" for err in e.errors()
        )
        p.error(bad)

    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="ppbert: %(message)s",
        stream=sys.stderr,
    )
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())
