from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from pathlib import Path

from trafdat.errors import VehicleEventError
from trafdat.preprocessing.binning import MISSING_DATA, SampleKind, bin_30_second_samples
from trafdat.vlog.reconstruct import read_event_log, reconstruct_stamps


@dataclass(frozen=True)
class VlogReport:
    path: str
    events: int
    resets: int
    parsed_stamps: int
    unresolved: int
    volume_periods: int | None = None
    speed_periods: int | None = None
    error: str | None = None


def check_vlog(path: Path) -> VlogReport:
    events = read_event_log(path.read_text(encoding="utf-8", errors="replace").splitlines())
    resets = sum(1 for e in events if e.reset)
    parsed = sum(1 for e in events if e.stamp is not None)
    try:
        reconstruct_stamps(events)
        unresolved = sum(1 for e in events if not e.is_resolved)
        volume = bin_30_second_samples(events, SampleKind.VOLUME)
        speed = bin_30_second_samples(events, SampleKind.SPEED)
    except VehicleEventError as exc:
        return VlogReport(
            path=str(path),
            events=len(events),
            resets=resets,
            parsed_stamps=parsed,
            unresolved=sum(1 for e in events if not e.is_resolved),
            error=exc.code,
        )
    return VlogReport(
        path=str(path),
        events=len(events),
        resets=resets,
        parsed_stamps=parsed,
        unresolved=unresolved,
        volume_periods=int((volume != MISSING_DATA).sum()),
        speed_periods=int((speed != MISSING_DATA).sum()),
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconstruct and bin local .vlog files for sanity checks.")
    parser.add_argument("paths", nargs="+", help="Vehicle log files to check.")
    parser.add_argument("--json", dest="json_path", default=None, help="Write JSON report to this path.")
    args = parser.parse_args()

    reports = [check_vlog(Path(p)) for p in args.paths]
    for rep in reports:
        print(f"[{Path(rep.path).name}] {rep.path}")
        print(f"  events={rep.events:,} resets={rep.resets:,} parsed_stamps={rep.parsed_stamps:,}")
        if rep.error:
            print(f"  error={rep.error} unresolved={rep.unresolved:,}")
            continue
        print(f"  volume_periods={rep.volume_periods:,} speed_periods={rep.speed_periods:,}")

    if args.json_path:
        out = Path(args.json_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = [asdict(r) for r in reports]
        out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"Wrote JSON: {out}")


if __name__ == "__main__":
    main()
