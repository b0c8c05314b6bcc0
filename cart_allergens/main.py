from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from .browser import capture_cart_page
from .config import KNOWN_KEYS, Config
from .errors import CartAllergensError, NoIngredientsFound
from .extract import extract_ingredients
from .fetch import threaded_fetcher
from .http import HttpClient
from .match import check_allergies, highlight_allergies
from .models import CartPage
from .pipeline import CartScanner, error_response, success_response
from .report import build_report

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="cart-allergens")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List recognised environment variables")
    sub_config.add_parser("show", help="Print the effective configuration")

    p_scan = sub.add_parser("scan", help="Check every product in a cart against your allergies")
    p_scan.add_argument("--allergy", "-a", action="append", default=[], help="Allergen to look for (repeatable)")
    src = p_scan.add_mutually_exclusive_group(required=True)
    src.add_argument("--html", help="Saved cart page HTML file")
    src.add_argument("--cdp", nargs="?", const="", help="Capture the cart from a running browser (CDP URL)")
    p_scan.add_argument("--base-url", default="https://www.amazon.com/", help="Origin for relative product links (--html)")
    p_scan.add_argument("--goto", default=None, help="Open this cart URL in the browser tab first (--cdp)")
    p_scan.add_argument("--batch", type=int, default=0, help="Concurrent fetches per window (0=config)")
    p_scan.add_argument("--json", action="store_true", help="Print the raw response object")
    p_scan.add_argument("--report", nargs="?", const="", default=None, help="Write a JSON run report (default path from config)")

    p_extract = sub.add_parser("extract", help="Print the ingredients of a saved product page")
    p_extract.add_argument("file", help="Product page HTML file")

    p_check = sub.add_parser("check", help="Match ingredient text against allergies")
    p_check.add_argument("text", help="Ingredient text")
    p_check.add_argument("--allergy", "-a", action="append", default=[], help="Allergen to look for (repeatable)")
    p_check.add_argument("--highlight", action="store_true", help="Print highlighted HTML")

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    cfg = Config.load_from_env()
    logging.basicConfig(
        level=logging.INFO if args.verbose else cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in KNOWN_KEYS:
                print(k)
            return 0

        if args.config_cmd == "show":
            for k, v in vars(cfg).items():
                print(f"{k}={v}")
            return 0

    if args.cmd == "extract":
        html = Path(args.file).read_text(encoding="utf-8", errors="replace")
        try:
            print(extract_ingredients(html))
        except NoIngredientsFound as exc:
            print(f"ERROR: {exc}")
            return 1
        return 0

    if args.cmd == "check":
        result = check_allergies(args.text, args.allergy)
        if args.highlight:
            print(highlight_allergies(args.text, args.allergy))
        if result.found:
            print(f"FOUND: {', '.join(result.matches)}")
        else:
            print("No allergens found.")
        return 0

    if args.cmd == "scan":
        return _run_scan(args, cfg)

    raise RuntimeError("unreachable")


def _load_page(args, cfg: Config) -> CartPage:
    if args.html:
        html = Path(args.html).read_text(encoding="utf-8", errors="replace")
        return CartPage(html=html, url=args.base_url)
    return capture_cart_page(args.cdp or cfg.cdp_url, navigate_to=args.goto)


def _run_scan(args, cfg: Config) -> int:
    if args.batch < 0:
        print(f"ERROR: --batch must be >= 1, got {args.batch}")
        return 1

    try:
        page = _load_page(args, cfg)
    except (OSError, RuntimeError) as exc:
        print(f"ERROR: could not load cart page: {exc}")
        return 1

    client = HttpClient(user_agent=cfg.user_agent, cookies=page.cookies, timeout_s=cfg.http_timeout_s)
    scanner = CartScanner(fetch_page=threaded_fetcher(client), width=args.batch or cfg.batch_size)

    try:
        results = asyncio.run(scanner.scrape(page, args.allergy))
    except CartAllergensError as exc:
        if args.json:
            print(json.dumps(error_response(str(exc)), indent=2))
        else:
            print(f"ERROR: {exc}")
        return 1
    finally:
        client.close()

    if args.json:
        print(json.dumps(success_response(results), indent=2))
        return 0

    report = build_report(results, allergies=args.allergy)
    print(report.summary_text())
    if args.report is not None:
        path = report.write_json(args.report or cfg.report_path)
        print(f"\nReport written to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
