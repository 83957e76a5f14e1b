from __future__ import annotations

import sys
from pathlib import Path

import gotypewriter
from gotypewriter.discover import find_go_files


def main() -> None:
    # Render every Go type under a directory (default: ./) in each dialect.
    #
    # Equivalent CLI:
    #   gotypewriter gen --lang ts --dir ./models --out models.ts
    root = Path(sys.argv[1] if len(sys.argv) > 1 else ".")
    paths = find_go_files(root)

    for dialect in gotypewriter.Dialect:
        print(f"--- {dialect.name.lower()} ---")
        result = gotypewriter.generate(paths, dialect, sys.stdout.buffer, elm_module="Models")
        sys.stdout.flush()
        for w in result.diagnostics.warnings:
            print(f"warning: {w}", file=sys.stderr)


if __name__ == "__main__":
    main()
