from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from trafdat.errors import ArchiveEntryNotFound
from trafdat.logging_config import configure_logging
from trafdat.preprocessing.summaries import daily_summary_frame
from trafdat.settings import get_config
from trafdat.storage.archive import TrafficArchive
from trafdat.storage.datasets import save_csv
from trafdat.storage.samples import decode_samples


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export one sensor-day of 30-second volume/speed samples to CSV."
    )
    parser.add_argument("--date", required=True, help="Archive date (yyyyMMdd).")
    parser.add_argument("--sensor", required=True, help="Sensor ID (file name without extension).")
    parser.add_argument(
        "--district",
        default=None,
        help="District (default: config.archive.district).",
    )
    parser.add_argument(
        "--base-path",
        default=None,
        help="Archive base path (default: config.archive.base_path).",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output CSV path (default: <sensor>_<date>.csv in the working directory).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()

    config = get_config()
    base_path = Path(args.base_path) if args.base_path else config.archive.base_path
    district = args.district or config.archive.district
    archive = TrafficArchive(base_path=base_path, district=district)

    channels: dict[str, Optional[list[Optional[int]]]] = {}
    for column, ext in (("volume", ".v30"), ("speed", ".s30")):
        name = f"{args.sensor}{ext}"
        try:
            channels[column] = decode_samples(archive.resolve(args.date, name), name)
        except ArchiveEntryNotFound:
            print(f"No {column} data: {district}/{args.date}/{name}")
            channels[column] = None

    if all(values is None for values in channels.values()):
        raise SystemExit(f"Nothing to export for {args.sensor} on {args.date}.")

    df = daily_summary_frame(args.date, channels, tz=ZoneInfo(config.app.timezone))
    output = Path(args.output) if args.output else Path(f"{args.sensor}_{args.date}.csv")
    save_csv(df, output)
    print(f"Saved sensor-day summary: {output}")
    print(f"Periods with volume: {int(df['volume'].notna().sum()):,}")


if __name__ == "__main__":
    main()
