from __future__ import annotations

import argparse
import importlib.metadata
import logging
import os
import sys
import tempfile
from pathlib import Path

from .config import Config
from .dialects import Dialect
from .errors import ConfigurationError, GoTypewriterError
from .pipeline import RunResult, generate

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="gotypewriter", description="Convert Go types to other languages.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print gotypewriter version.")
    sub.add_parser("dialects", help="List the supported output dialects.")

    p_gen = sub.add_parser("gen", help="Generate type declarations from Go source files.")
    p_gen.add_argument(
        "--lang",
        default=None,
        help="Output dialect: ts, py, elm or flow (default: GOTYPEWRITER_LANG).",
    )
    p_gen.add_argument("--dir", default="./", help="Directory to parse types from (default: ./).")
    p_gen.add_argument(
        "--file",
        action="append",
        default=None,
        help="Parse a single Go file; repeatable. Overrides --dir.",
    )
    p_gen.add_argument("--out", default=None, help="Output file path (default: stdout).")
    p_gen.add_argument(
        "--no-recursive",
        dest="recursive",
        action="store_false",
        help="Only parse files directly inside --dir.",
    )
    p_gen.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging, detailing every skipped type, file or field.",
    )
    p_gen.add_argument(
        "--keep-going",
        action="store_true",
        help="Render the files that parsed even if others failed (exit status stays non-zero).",
    )
    p_gen.add_argument("--jobs", type=int, default=1, help="Parse files on this many threads.")
    p_gen.add_argument("--elm-module", default="Types", help="Module name for Elm output (default: Types).")

    args = parser.parse_args(argv)
    if args.cmd == "version":
        try:
            print(importlib.metadata.version("gotypewriter"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return 0

    if args.cmd == "dialects":
        for d in Dialect:
            print(f"{d.value}\t{d.name.lower()}")
        return 0

    try:
        cfg = Config.resolve(
            dialect=args.lang,
            files=args.file,
            directory=args.dir,
            recursive=args.recursive,
            verbose=args.verbose,
            out=args.out,
            keep_going=args.keep_going,
            jobs=args.jobs,
            elm_module=args.elm_module,
        )
    except ConfigurationError as e:
        print(f"gotypewriter: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.INFO if cfg.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        result = _run(cfg)
    except ConfigurationError as e:
        print(f"gotypewriter: {e}", file=sys.stderr)
        return 2
    except GoTypewriterError as e:
        print(f"gotypewriter: {e}", file=sys.stderr)
        return 1

    if not result.ok:
        for err in result.errors:
            print(f"gotypewriter: {err}", file=sys.stderr)
        print(f"gotypewriter: {len(result.errors)} file(s) failed to parse", file=sys.stderr)
        return 1
    return 0


def _run(cfg: Config) -> RunResult:
    kwargs = dict(
        verbose=cfg.verbose,
        keep_going=cfg.keep_going,
        jobs=cfg.jobs,
        elm_module=cfg.elm_module,
    )
    if cfg.out is None:
        return generate(list(cfg.paths), cfg.dialect, sys.stdout.buffer, **kwargs)
    return _generate_to_file(cfg.out, cfg, kwargs)


def _generate_to_file(out: Path, cfg: Config, kwargs: dict) -> RunResult:
    # Write to a sibling temp file and replace atomically, so a failed run
    # never leaves a half-written output file.
    parent = out.parent if str(out.parent) else Path(".")
    try:
        fd, tmp = tempfile.mkstemp(prefix=out.name + ".", dir=str(parent))
    except OSError as e:
        raise ConfigurationError(f"cannot write output to {out}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            result = generate(list(cfg.paths), cfg.dialect, f, **kwargs)
        # mkstemp creates 0600; give the output the mode a plain open() would.
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp, 0o666 & ~umask)
        os.replace(tmp, out)
    finally:
        try:
            if os.path.exists(tmp):
                os.unlink(tmp)
        except OSError:
            log.debug("could not remove temporary file %s", tmp)
    log.info("saved %s", out)
    return result
