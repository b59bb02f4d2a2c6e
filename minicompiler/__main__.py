"""Command-line entry point: ``minicompiler [file] [options]``."""

from __future__ import annotations

import argparse
import json
import logging

from .api import build_symbol_table, build_tree, compile_source
from .config import ToolchainConfig
from . import constants

_DEMO_SOURCE = """\
#include <stdio.h>

int counter = 0;

int add(int a, int b) {
    return a + b;
}

int main() {
    int total = add(2, 3);
    for (int i = 0; i < 3; i++) {
        counter = counter + i;
    }
    if (total > 4) {
        printf("total=%d counter=%d\\n", total, counter);
    } else {
        printf("small\\n");
    }
    return 0;
}
"""


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="minicompiler",
        description="Structural analysis of small C and JavaScript programs",
    )
    parser.add_argument("file", nargs="?", help="Source file to analyse")
    parser.add_argument(
        "--language",
        "-l",
        default=constants.LANGUAGE_C,
        choices=constants.SUPPORTED_LANGUAGES,
        help="Source language (default: c)",
    )
    only = parser.add_mutually_exclusive_group()
    only.add_argument(
        "--tree-only", action="store_true", help="Only print the node tree"
    )
    only.add_argument(
        "--symbols-only", action="store_true", help="Only print the symbol table"
    )
    parser.add_argument(
        "--no-run", action="store_true", help="Compile but do not execute"
    )
    parser.add_argument(
        "--cc",
        default=constants.DEFAULT_C_COMPILER,
        help="C compiler (default: gcc)",
    )
    parser.add_argument(
        "--node",
        default=constants.DEFAULT_JS_RUNTIME,
        help="JavaScript runtime (default: node)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=constants.DEFAULT_RUN_TIMEOUT,
        help="Execution timeout in seconds (default: 5)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log pipeline progress"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    if not args.file:
        # Demo mode: use a built-in example
        source = _DEMO_SOURCE
        language = constants.LANGUAGE_C
    else:
        with open(args.file, encoding="utf-8") as f:
            source = f.read()
        language = args.language

    if args.tree_only:
        print(json.dumps(build_tree(source, language).to_dict(), indent=2))
        return

    if args.symbols_only:
        table = build_symbol_table(source, language)
        print(
            json.dumps(
                {name: entry.to_dict() for name, entry in table.items()}, indent=2
            )
        )
        return

    config = ToolchainConfig(
        c_compiler=args.cc,
        js_runtime=args.node,
        run_timeout=args.timeout,
        execute=not args.no_run,
    )
    response = compile_source(source, language, config=config)
    print(json.dumps(response.to_dict(), indent=2))


if __name__ == "__main__":
    main()
