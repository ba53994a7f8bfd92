#!/usr/bin/env python3
"""
Preview script translating saved pixiv novel webview pages.

Each file is translated independently; the novel id is taken from the file
name. Prints a summary table, the HTML of every page (--html), or the
truncated results (--verbose).
"""

import argparse
import logging
import sys
from pathlib import Path

from pixnovel.translation import translate_many
from pixnovel.utils.config import load_config, setup_logging
from pixnovel.utils.print import print_result_details, print_results


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Translate pixiv novel webview pages into HTML"
    )
    parser.add_argument(
        "pages", nargs="+", type=Path,
        help="Saved webview HTML files"
    )
    parser.add_argument(
        "--proxy", default=None,
        help="Image proxy base, overrides config (empty string allowed)"
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Path to an alternative config.yaml"
    )
    parser.add_argument(
        "--html", action="store_true",
        help="Print the translated HTML of every page"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config) if args.config else load_config()
    if args.verbose:
        setup_logging(debug=True)
        logging.getLogger().setLevel(logging.DEBUG)
    logger = logging.getLogger(__name__)

    proxy_base = args.proxy if args.proxy is not None \
        else config.resolved_img_proxy()

    documents = {}
    for page in args.pages:
        try:
            documents[page.stem] = page.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed reading {page}: {e}")
            return 1

    results = translate_many(documents, proxy_base)

    if args.html:
        for result in results:
            print(result.content)
    else:
        print_results(results)
        if args.verbose:
            print_result_details(results)

    return 0 if all(r.success for r in results) else 2


if __name__ == "__main__":
    sys.exit(main())
