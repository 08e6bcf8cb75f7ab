from __future__ import annotations

import json
from pathlib import Path

import pytest

from shipdoc.models.config_models import AppConfig, GeneratorSettings
from shipdoc.services.orchestrator import ProcessingError, process_all, scan_excel_files


def _config(temp_workdir: Path, **generator) -> AppConfig:
    return AppConfig(
        source_directory=str(temp_workdir / "data"),
        output_directory=str(temp_workdir / "out"),
        generator=GeneratorSettings(**generator),
    )


def test_scan_excel_files(temp_workdir: Path):
    data = temp_workdir / "data"
    (data / "b.xlsx").write_bytes(b"")
    (data / "a.xlsx").write_bytes(b"")
    (data / "~$a.xlsx").write_bytes(b"")
    (data / "notes.txt").write_text("x")
    assert [p.name for p in scan_excel_files(data)] == ["a.xlsx", "b.xlsx"]


def test_scan_missing_directory(temp_workdir: Path):
    with pytest.raises(ProcessingError):
        scan_excel_files(temp_workdir / "nope")


def test_process_all_success(temp_workdir: Path, make_order_file, valid_order_rows):
    make_order_file("batch1.xlsx", valid_order_rows)
    result = process_all(_config(temp_workdir, duplicate_by_quantity=True), logs_dir=temp_workdir / "logs")

    assert result.success_files == 1
    assert result.failed_files == 0
    assert result.total_rows == 2
    assert result.total_records == 3  # 2 行目は数量 2
    assert result.total_errors == 0
    assert result.file_stats[0].status == "success"

    doc = (temp_workdir / "out" / "batch1.xml").read_text(encoding="utf-8")
    assert "<customer-ref1>ORD-1002-2</customer-ref1>" in doc
    assert "<prov-state>ON</prov-state>" in doc
    assert '<option code="SO"/>' in doc  # $249.00 > 200
    assert list((temp_workdir / "logs").iterdir()) == []


def test_process_all_invalid_file_writes_no_document(temp_workdir: Path, make_order_file, valid_order_rows):
    make_order_file("good.xlsx", valid_order_rows)
    make_order_file("missing_city.xlsx", [["ORD-9", "Zoe", "1 Elm", None, "ON", "K1A0B1", "CA", 1, 5]])
    result = process_all(_config(temp_workdir), logs_dir=temp_workdir / "logs")

    assert result.success_files == 1
    assert result.failed_files == 1
    assert result.total_errors == 1
    assert {s.file_name: s.status for s in result.file_stats} == {"good.xlsx": "success", "missing_city.xlsx": "invalid"}
    assert not (temp_workdir / "out" / "missing_city.xml").exists()

    (log_file,) = list((temp_workdir / "logs").iterdir())
    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
    assert record["file"] == "missing_city.xlsx"
    assert record["row"] == 1
    assert record["field"] == "City"


def test_process_all_malformed_file(temp_workdir: Path):
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"garbage")
    result = process_all(_config(temp_workdir), logs_dir=temp_workdir / "logs")
    assert result.failed_files == 1
    assert result.file_stats[0].status == "failed"
    (log_file,) = list((temp_workdir / "logs").iterdir())
    record = json.loads(log_file.read_text(encoding="utf-8"))
    assert record["row"] == -1
    assert record["error_type"] == "MALFORMED_SOURCE"


def test_process_all_serialization_failure(temp_workdir: Path, make_order_file, valid_order_rows):
    make_order_file("orders.xlsx", valid_order_rows)
    result = process_all(_config(temp_workdir, default_service_code=""), logs_dir=temp_workdir / "logs")
    assert result.failed_files == 1
    assert result.file_stats[0].status == "failed"
    assert not (temp_workdir / "out" / "orders.xml").exists()


def test_process_all_empty_directory(temp_workdir: Path):
    result = process_all(_config(temp_workdir), logs_dir=temp_workdir / "logs")
    assert (result.success_files, result.failed_files, result.total_rows) == (0, 0, 0)
    assert result.file_stats == []


def test_process_all_missing_source_directory(temp_workdir: Path):
    cfg = AppConfig(source_directory=str(temp_workdir / "missing"), output_directory=str(temp_workdir / "out"))
    with pytest.raises(ProcessingError):
        process_all(cfg, logs_dir=temp_workdir / "logs")


def _single_log_record(logs_dir: Path) -> dict:
    (log_file,) = list(logs_dir.iterdir())
    (line,) = log_file.read_text(encoding="utf-8").splitlines()
    return json.loads(line)


def test_process_all_empty_service_code_fails_file(temp_workdir: Path, make_order_file, valid_order_rows):
    make_order_file("orders.xlsx", valid_order_rows)
    result = process_all(_config(temp_workdir, default_service_code=""), logs_dir=temp_workdir / "logs")

    assert result.failed_files == 1
    assert result.success_files == 0
    assert result.total_records == 0
    assert result.total_errors == 1
    assert result.file_stats[0].status == "failed"
    assert list((temp_workdir / "out").glob("*.xml")) == []

    record = _single_log_record(temp_workdir / "logs")
    assert record["file"] == "orders.xlsx"
    assert record["row"] == -1
    assert record["error_type"] == "SERIALIZATION_CONTRACT"
    assert "service code cannot be empty" in record["message"]


def test_process_all_unparsable_mapping_file_fails_file(temp_workdir: Path, make_order_file, valid_order_rows):
    make_order_file("orders.xlsx", valid_order_rows)
    mapping = temp_workdir / "config" / "mapping.json"
    mapping.write_text("Order Number -> CustomerReference", encoding="utf-8")
    config = AppConfig(
        source_directory=str(temp_workdir / "data"),
        output_directory=str(temp_workdir / "out"),
        mapping_file=str(mapping),
    )
    result = process_all(config, logs_dir=temp_workdir / "logs")

    assert result.failed_files == 1
    assert result.file_stats[0].status == "failed"
    assert list((temp_workdir / "out").glob("*.xml")) == []

    record = _single_log_record(temp_workdir / "logs")
    assert record["row"] == -1
    assert record["error_type"] == "MAPPING_ERROR"
