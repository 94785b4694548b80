"""OrderPool — CLI entry point.

Replays a CSV of OHLCV bars through the liquidity engine and reports the
alerts and zones it produced.

Usage:
    python -m orderpool.main --csv data/es_5m.csv --ticker ES1! --json out.json
"""

import argparse
import json
import logging
from pathlib import Path

logger = logging.getLogger("orderpool")


def _run_cli(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run the replay and return an exit code."""
    from orderpool.config import load_config
    from orderpool.replay import load_bars_csv, run_replay

    parser = argparse.ArgumentParser(description="OrderPool liquidity zone replay")
    parser.add_argument("--csv", required=True, help="OHLCV CSV with a 'time' column")
    parser.add_argument("--ticker", help="Symbol used in alert messages")
    parser.add_argument("--env", help="Path to a .env file (default: ./.env)")
    parser.add_argument("--json", dest="json_out", help="Write the full replay to this file")
    args = parser.parse_args(argv)

    config = load_config(env_path=args.env)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    bars = load_bars_csv(args.csv, tz=config.bar_timezone)
    if not bars:
        logger.warning("No bars in %s, nothing to replay.", args.csv)
        return 1

    result = run_replay(bars, config, ticker=args.ticker)

    for zone in result["final_zones"]:
        logger.info(
            "Active %s zone [%.5f, %.5f] class=%s created at bar %d",
            zone["side"], zone["bottom"], zone["top"],
            zone["liquidity_class"], zone["created_index"],
        )

    if args.json_out:
        out = Path(args.json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(result, indent=2), encoding="utf-8")
        logger.info("Replay written to %s", out)
    return 0


if __name__ == "__main__":
    raise SystemExit(_run_cli())
