from dataclasses import replace

import pytest

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.models import (
    AnonymizationOptions,
    AnonymizationRule,
    ReplacementStrategy,
    RuleType,
)
from telemetry_anonymizer.processor.database_processor import DatabaseRecordProcessor


@pytest.fixture()
def vm_row() -> dict:
    return {
        "vmid": 100,
        "name": "web-server-01",
        "node": "pve-node-01",
        "ip": "10.0.0.5",
        "memory": 2048,
        "running": True,
        "owner": None,
        "status": "running on pve-node-01",
    }


class TestIsIdentifyingField:
    @pytest.mark.parametrize("field", ["hostname", "vm_name", "ip", "owner", "NODE", "vmid"])
    def test_identifying(self, field: str) -> None:
        assert DatabaseRecordProcessor.is_identifying_field(field) is True

    @pytest.mark.parametrize("field", ["memory", "status", "cores", "running"])
    def test_not_identifying(self, field: str) -> None:
        assert DatabaseRecordProcessor.is_identifying_field(field) is False


class TestDatabaseRecordProcessor:
    def test_anonymizes_identifying_columns(
        self, engine: AnonymizationEngine, options: AnonymizationOptions, vm_row: dict
    ) -> None:
        row = DatabaseRecordProcessor(engine).process({"vms": [vm_row]}, options).data["vms"][0]
        assert row["name"] != "web-server-01"
        assert row["node"] != "pve-node-01"
        assert row["ip"] != "10.0.0.5"

    def test_other_columns_pass_through(
        self, engine: AnonymizationEngine, options: AnonymizationOptions, vm_row: dict
    ) -> None:
        row = DatabaseRecordProcessor(engine).process({"vms": [vm_row]}, options).data["vms"][0]
        assert row["memory"] == 2048
        assert row["running"] is True
        assert row["owner"] is None
        assert row["status"] == "running on pve-node-01"

    def test_untouched_number_keeps_type(
        self, engine: AnonymizationEngine, options: AnonymizationOptions, vm_row: dict
    ) -> None:
        row = DatabaseRecordProcessor(engine).process([vm_row], options).data[0]
        assert row["vmid"] == 100
        assert isinstance(row["vmid"], int)

    def test_float_keeps_type(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        row = DatabaseRecordProcessor(engine).process([{"id": 1.5}], options).data[0]
        assert row == {"id": 1.5}

    def test_rewritten_number_becomes_text(
        self, engine: AnonymizationEngine, options: AnonymizationOptions, vm_row: dict
    ) -> None:
        rule = AnonymizationRule(
            type=RuleType.CUSTOM_PATTERN,
            pattern=r"\d+",
            replacement=ReplacementStrategy.GENERIC,
            category="custom",
            priority=500,
        )
        row = DatabaseRecordProcessor(engine).process(
            [vm_row], replace(options, custom_rules=(rule,))
        ).data[0]
        assert row["vmid"] == "[CUSTOM_PATTERN]"

    def test_single_row_table(
        self, engine: AnonymizationEngine, options: AnonymizationOptions, vm_row: dict
    ) -> None:
        data = DatabaseRecordProcessor(engine).process({"cluster": vm_row}, options).data
        assert data["cluster"]["ip"] != "10.0.0.5"

    def test_scalar_table_value_passes_through(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        data = DatabaseRecordProcessor(engine).process({"count": 3, "rows": ["x"]}, options).data
        assert data == {"count": 3, "rows": ["x"]}

    def test_non_tabular_input_passes_through(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        result = DatabaseRecordProcessor(engine).process("10.0.0.5", options)
        assert result.data == "10.0.0.5"
        assert result.metadata.is_anonymized is False

    def test_consistent_across_tables(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        data = DatabaseRecordProcessor(engine).process(
            {"vms": [{"node": "pve-node-01"}], "nodes": [{"hostname": "pve-node-01"}]},
            options,
        ).data
        assert data["vms"][0]["node"] == data["nodes"][0]["hostname"]
