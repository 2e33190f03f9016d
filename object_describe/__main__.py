"""
CLI interface for describing the value of a Python expression.

Usage:
    python -m object_describe "[1, 2, 3]"
    python -m object_describe --format html "import datetime; datetime.date.today()" > out.html
    echo "{'a': 1}" | python -m object_describe --indent 2
"""

import argparse
import ast
import json
import linecache
import logging
import sys

from typing import Any

from .describe import DescribeOptions, describe
from .render import render_html
from .sentinels import UNDEFINED

logger = logging.getLogger(__name__)

SOURCE_FILENAME = "<object-describe-input>"


def evaluate(source: str, namespace: dict | None = None) -> Any:
    """
    Run Python source and return the value of its last statement.

    Every statement but the last is executed; the last is evaluated when it is an expression.
    Source without a trailing expression yields UNDEFINED. The source is registered with
    linecache so functions it defines still have retrievable source text.

    Examples:
        >>> evaluate("x = 2\\nx * 21")
        42
    """
    tree = ast.parse(source, filename=SOURCE_FILENAME, mode="exec")
    linecache.cache[SOURCE_FILENAME] = (len(source), None, source.splitlines(True), SOURCE_FILENAME)
    namespace = {} if namespace is None else namespace

    if not tree.body or not isinstance(tree.body[-1], ast.Expr):
        exec(compile(tree, SOURCE_FILENAME, "exec"), namespace)
        return UNDEFINED

    statements = ast.Module(body=tree.body[:-1], type_ignores=[])
    expression = ast.Expression(body=tree.body[-1].value)
    exec(compile(statements, SOURCE_FILENAME, "exec"), namespace)
    return eval(compile(expression, SOURCE_FILENAME, "eval"), namespace)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(
        description="Describe the value of a Python expression", prog="python -m object_describe"
    )
    parser.add_argument("expression", nargs="?", help="Python source; the value of its last expression "
                                                      "is described (default: read from stdin)")
    parser.add_argument("--format", "-f", choices=("json", "html"), default="json",
                        help="Output format (default: json)")
    parser.add_argument("--indent", type=int, default=None, help="JSON indentation (default: compact)")
    parser.add_argument("--stylesheet", default="object-describe.css", help="Stylesheet linked from HTML output")
    parser.add_argument("--truncate-at", type=int, default=100, help="Maximum length of serialized strings")
    parser.add_argument("--bucket-size", type=int, default=10, help="Number of sampled items per bucket")
    parser.add_argument("--max-total", type=int, default=50, help="Maximum number of sampled items per iterable")
    parser.add_argument("--max-depth", type=int, default=3,
                        help="Number of nesting levels expanded; deeper values are summarized (default: 3)")
    parser.add_argument("--full", action="store_true", help="Describe the whole prototype chain, including object")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug messages to stderr")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        options = DescribeOptions(
            truncate_at=args.truncate_at,
            bucket_size=args.bucket_size,
            max_total=args.max_total,
            max_depth=args.max_depth,
            ignored_types=() if args.full else DescribeOptions().ignored_types,
        )
    except (TypeError, ValueError) as e:
        parser.error(str(e))

    source = args.expression if args.expression is not None else sys.stdin.read()

    try:
        value = evaluate(source)
    except Exception as e:
        print(f"error: evaluation failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    try:
        description = describe(value, options=options)
        if args.format == "html":
            output = render_html(description, stylesheet=args.stylesheet)
        else:
            output = json.dumps(description.to_dict(), indent=args.indent, ensure_ascii=False)
    except Exception as e:
        logger.debug("describe failed", exc_info=True)
        print(f"error: describe failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 2

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
