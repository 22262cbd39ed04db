import argparse
import logging
import sys

from etfplan import pipeline
from etfplan.config import CENTS_PER_UNIT, DEFAULT_STORE_PATH, LOG_DATE_FORMAT, LOG_FORMAT
from etfplan.errors import PlannerError
from etfplan.portfolio_engine import PortfolioEngine
from etfplan.price_source import YahooPriceSource
from etfplan.settings_store import SettingsStore


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # yfinance is chatty at INFO
    logging.getLogger("yfinance").setLevel(logging.WARNING)


def _money(cents: float) -> str:
    return f"{cents / CENTS_PER_UNIT:,.2f}"


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="etfplan",
        description="Plan whole-unit ETF purchases that keep a portfolio near its target weights.",
    )
    parser.add_argument("--store", default=str(DEFAULT_STORE_PATH), help="settings file (JSON)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="print budget and tracked ETFs")
    sub.add_parser("suggest", help="plan the next purchases")

    p = sub.add_parser("budget", help="set the budget (cents)")
    p.add_argument("amount", type=int)

    p = sub.add_parser("add", help="look up an ISIN and track it")
    p.add_argument("isin")
    p.add_argument("proportion", type=float)
    p.add_argument("--cumulative", type=int, default=0, help="amount already held (cents)")

    p = sub.add_parser("remove", help="stop tracking an ETF")
    p.add_argument("id")

    p = sub.add_parser("proportion", help="change an ETF's target weight")
    p.add_argument("id")
    p.add_argument("value", type=float)

    p = sub.add_parser("cumulative", help="change an ETF's held amount (cents)")
    p.add_argument("id")
    p.add_argument("amount", type=int)

    p = sub.add_parser("price", help="print the current price of a ticker")
    p.add_argument("ticker")

    p = sub.add_parser("search", help="list listings for an ISIN")
    p.add_argument("isin")

    return parser.parse_args(argv)


def run(args: argparse.Namespace, store: SettingsStore, source: YahooPriceSource) -> None:
    if args.command == "show":
        settings = pipeline.get_settings(store)
        print(f"Budget: {_money(settings.budget)}")
        for etf in settings.etf_settings:
            print(f"  {etf.id:<12} {etf.ideal_proportion:>6.2f}  {_money(etf.cumulative):>14}  {etf.name}")

    elif args.command == "budget":
        store.set_budget(args.amount)
        print(f"Budget set to {_money(args.amount)}")

    elif args.command == "add":
        etf = pipeline.register_etf(store, source, args.isin, args.proportion, args.cumulative)
        print(f"Tracking {etf.id} ({etf.name})")

    elif args.command == "remove":
        store.remove_asset(args.id)
        print(f"Removed {args.id}")

    elif args.command == "proportion":
        store.update_proportion(args.id, args.value)
        print(f"{args.id}: target weight {args.value}")

    elif args.command == "cumulative":
        store.update_cumulative(args.id, args.amount)
        print(f"{args.id}: holding {_money(args.amount)}")

    elif args.command == "price":
        print(f"Most recent price of {args.ticker} is {source.get_price(args.ticker)}")

    elif args.command == "search":
        for hit in source.search_by_isin(args.isin):
            print(f"  {hit.ticker:<12} {hit.name}")

    elif args.command == "suggest":
        budget = store.get_budget()
        investments = pipeline.suggest_investments(store, source)
        if not investments:
            print("No ETFs tracked.")
            return
        print(PortfolioEngine.summary_frame(investments).to_string(index=False))
        print(f"\nSpent:     {_money(PortfolioEngine.total_amount_spent(investments))}")
        print(f"Left over: {_money(PortfolioEngine.left_over_budget(budget, investments))}")


def main(argv=None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    try:
        run(args, SettingsStore(args.store), YahooPriceSource())
    except PlannerError as exc:
        print(f"Error [{exc.kind.value}]: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
