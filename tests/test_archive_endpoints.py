from __future__ import annotations

import os
import zipfile
from pathlib import Path

from fastapi.testclient import TestClient


VLOG = "100,,00:00:10,50\n100,2000,,60\n100,,00:00:45,70\n"


def _client(monkeypatch, tmp_path: Path, *, cache: bool = False) -> TestClient:
    base = tmp_path / "traffic"
    day = base / "tms" / "2023" / "20230101"
    day.mkdir(parents=True, exist_ok=True)
    (day / "det1.vlog").write_text(VLOG, encoding="utf-8")
    (day / "det3.c30").write_bytes(b"\x00\x05\xff\xff")
    with zipfile.ZipFile(base / "tms" / "2023" / "20230102.traffic", "w") as zf:
        zf.writestr("det2.s30", bytes([44, 0xFF]))

    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"archive:\n  base_path: {base}\napi:\n  cache:\n    enabled: {'true' if cache else 'false'}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TRAFDAT_CONFIG", str(config_path))
    monkeypatch.setattr("trafdat.settings._CONFIG", None)

    from trafdat.api.app import create_app

    return TestClient(create_app())


def test_list_dates_endpoint(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    resp = client.get("/tms/2023")
    assert resp.status_code == 200, resp.text
    assert resp.text == "20230101\n20230102\n"
    assert client.get("/tms/23").status_code == 400


def test_list_files_endpoint(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    resp = client.get("/tms/2023/20230101")
    assert resp.status_code == 200, resp.text
    assert resp.text.splitlines() == ["det1.vlog", "det3.c30"]
    assert client.get("/tms/2023/20220101").status_code == 400


def test_list_sensors_endpoint(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    resp = client.get("/tms/sensors/20230101")
    assert resp.status_code == 200, resp.text
    assert resp.json()["items"] == ["det1", "det3"]

    empty = client.get("/tms/sensors/20230105").json()
    assert empty["items"] == []
    assert empty["reason"]["code"] == "no_sensors"


def test_sample_endpoint_bins_vehicle_log(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    resp = client.get("/tms/2023/20230101/det1.v30")
    assert resp.status_code == 200, resp.text
    assert resp.headers["content-type"] == "application/octet-stream"
    assert len(resp.content) == 2880
    assert resp.content[:3] == bytes([2, 1, 0xFF])


def test_sample_endpoint_json(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    speeds = client.get("/tms/2023/20230101/det1.s30.json").json()
    assert len(speeds) == 2880
    assert speeds[:3] == [55, 70, None]

    zipped = client.get("/tms/2023/20230102/det2.s30.json").json()
    assert zipped == [44, None]

    occupancy = client.get("/tms/2023/20230101/det3.c30.json").json()
    assert occupancy == [5, None]

    assert client.get("/tms/2023/20230101/det1.vlog.json").status_code == 400


def test_sample_endpoint_errors(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    assert client.get("/tms/2023/20230101/det9.v30").status_code == 404
    assert client.get("/tms/2023/20230101/det1.txt").status_code == 400
    assert client.get("/tms/2023/20230101/a_very_long_detector_name.v30").status_code == 400
    assert client.get("/tms/2022/20230101/det1.v30").status_code == 400


def test_sample_endpoint_reports_reconstruction_failure(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    day = tmp_path / "traffic" / "tms" / "2023" / "20230101"
    (day / "bad.vlog").write_text("0,,00:00:05,\n0,,00:00:05,\n", encoding="utf-8")
    resp = client.get("/tms/2023/20230101/bad.v30")
    assert resp.status_code == 500
    assert resp.json()["detail"]["code"] == "non_positive_headway"


def test_export_csv_endpoint(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path)
    resp = client.get("/exports/tms/20230101/det1.csv")
    assert resp.status_code == 200, resp.text
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.splitlines()
    assert lines[0] == "timestamp,period,volume,speed"
    assert len(lines) == 2881
    assert lines[1].endswith(",0,2,55")

    assert client.get("/exports/tms/20230101/det9.csv").status_code == 404


def test_cached_sample_invalidated_when_file_changes(monkeypatch, tmp_path) -> None:
    client = _client(monkeypatch, tmp_path, cache=True)
    first = client.get("/tms/2023/20230101/det3.c30")
    assert first.headers.get("X-Cache") == "MISS"
    second = client.get("/tms/2023/20230101/det3.c30")
    assert second.headers.get("X-Cache") == "HIT"
    assert second.content == first.content

    path = tmp_path / "traffic" / "tms" / "2023" / "20230101" / "det3.c30"
    path.write_bytes(b"\x00\x06")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))

    third = client.get("/tms/2023/20230101/det3.c30")
    assert third.headers.get("X-Cache") == "MISS"
    assert third.content == b"\x00\x06"
