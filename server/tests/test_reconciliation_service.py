"""
Integration tests for inventory reconciliation.

Tests cover:
- The first import into a datacenter (catalog, ledger, audit)
- Reset-to-zero of MSFs absent from a later export
- Empty batches never opening a pass
- Datacenter isolation and the shared catalog
- Coalesce-on-write of derived attributes
- All-or-nothing rollback on failure
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from cable_inventory.models.inventory import CatalogEntry, ImportRecord, LedgerEntry
from cable_inventory.repositories import ledger_repo
from cable_inventory.services.inventory_csv_parser import parse_inventory_csv
from cable_inventory.services.inventory_service import resolve_current_quantity
from cable_inventory.services.reconciliation_service import (
    NO_VALID_RECORDS_MESSAGE,
    EmptyBatchError,
    ImportStatus,
    ReconciliationFailedError,
    import_inventory_file,
    reconcile_inventory,
)

pytestmark = pytest.mark.integration


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def _snapshot(db) -> dict:
    return {
        "products": db.execute(
            select(CatalogEntry.msf, CatalogEntry.item_name, CatalogEntry.category)
            .order_by(CatalogEntry.msf)
        ).all(),
        "ledger": db.execute(
            select(LedgerEntry.id, LedgerEntry.msf, LedgerEntry.datacenter, LedgerEntry.quantity)
            .order_by(LedgerEntry.id)
        ).all(),
        "imports": db.execute(select(ImportRecord.id).order_by(ImportRecord.id)).all(),
    }


@pytest.fixture
def patchcord_export(make_export):
    return make_export([
        {
            "Datacenter": "DC1",
            "MSF": "X1",
            "Item Name": "CAT6 COPPER 2FT PATCHCORD",
            "Item Group": "PatchCords",
            "Current Location": "A1",
            "OnHand Quantity": "15",
        }
    ])


# =============================================================================
# First import
# =============================================================================


class TestFirstImport:

    def test_patchcord_into_dc1(self, test_db, settings, patchcord_export):
        outcome = import_inventory_file(test_db, patchcord_export, "dc1.csv", "DC1", settings)

        assert outcome.status == ImportStatus.SUCCESS
        assert outcome.success
        assert outcome.records_processed == 1
        assert outcome.new_products == 1
        assert outcome.updated_products == 0
        assert outcome.error is None

        entry = test_db.get(CatalogEntry, "X1")
        assert entry.category == "Copper"
        assert entry.cable_length == "2FT"
        assert entry.cable_type == "Copper"
        assert entry.location == "A1"
        assert resolve_current_quantity(test_db, "X1", "DC1") == 15

    def test_audit_record_written(self, test_db, settings, patchcord_export):
        import_inventory_file(test_db, patchcord_export, "dc1.csv", "DC1", settings)

        record = test_db.scalars(select(ImportRecord)).one()
        assert record.filename == "dc1.csv"
        assert record.datacenter == "DC1"
        assert record.records_processed == 1
        assert record.new_products == 1
        assert record.updated_products == 0

    def test_datacenter_is_trimmed(self, test_db, settings, patchcord_export):
        import_inventory_file(test_db, patchcord_export, "dc1.csv", "  DC1 ", settings)

        assert resolve_current_quantity(test_db, "X1", "DC1") == 15

    def test_first_import_into_empty_catalog_writes_no_reset(self, test_db, settings):
        records = parse_inventory_csv("MSF,Item Name,OnHand Quantity\nX1,CAT6 1M,4\n")

        result = reconcile_inventory(test_db, records, "a.csv", "DC1", settings)

        assert result.reset_count == 0
        assert _count(test_db, LedgerEntry) == 1


# =============================================================================
# Reset and re-import
# =============================================================================


class TestReset:

    def test_absent_msf_reads_zero(self, test_db, settings, make_export):
        first = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"},
            {"MSF": "X2", "Item Name": "CAT6 2M", "OnHand Quantity": "7"},
        ])
        second = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "5"},
        ])

        import_inventory_file(test_db, first, "first.csv", "DC1", settings)
        import_inventory_file(test_db, second, "second.csv", "DC1", settings)

        assert resolve_current_quantity(test_db, "X1", "DC1") == 5
        assert resolve_current_quantity(test_db, "X2", "DC1") == 0
        # The catalog keeps MSFs that disappear from an export.
        assert test_db.get(CatalogEntry, "X2") is not None

    def test_reset_rows_are_tagged(self, test_db, settings, make_export):
        content = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"}])
        import_inventory_file(test_db, content, "first.csv", "DC1", settings)

        records = parse_inventory_csv(content)
        result = reconcile_inventory(test_db, records, "second.csv", "DC1", settings)

        assert result.reset_count == 1
        history = ledger_repo.get_history(test_db, "X1", "DC1")
        assert [(e.quantity, e.source_file) for e in history] == [
            (3, "second.csv"),
            (0, "second.csv (reset)"),
            (3, "first.csv"),
        ]

    def test_reset_precedes_real_rows(self, test_db, settings, make_export):
        content = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"}])
        import_inventory_file(test_db, content, "first.csv", "DC1", settings)
        import_inventory_file(test_db, content, "second.csv", "DC1", settings)
        test_db.expire_all()

        reset, real = test_db.scalars(
            select(LedgerEntry)
            .where(LedgerEntry.source_file.like("second.csv%"))
            .order_by(LedgerEntry.id)
        ).all()
        assert reset.quantity == 0
        assert reset.import_timestamp < real.import_timestamp

    def test_reimport_is_idempotent(self, test_db, settings, make_export):
        content = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"},
            {"MSF": "X2", "Item Name": "400G AOC 7M", "OnHand Quantity": "8"},
        ])

        import_inventory_file(test_db, content, "a.csv", "DC1", settings)
        products_after_first = test_db.execute(
            select(CatalogEntry.msf, CatalogEntry.category, CatalogEntry.cable_length)
            .order_by(CatalogEntry.msf)
        ).all()

        outcome = import_inventory_file(test_db, content, "a.csv", "DC1", settings)

        assert outcome.new_products == 0
        assert outcome.updated_products == 2
        assert resolve_current_quantity(test_db, "X1", "DC1") == 3
        assert resolve_current_quantity(test_db, "X2", "DC1") == 8
        assert test_db.execute(
            select(CatalogEntry.msf, CatalogEntry.category, CatalogEntry.cable_length)
            .order_by(CatalogEntry.msf)
        ).all() == products_after_first

    def test_last_duplicate_wins(self, test_db, settings, make_export):
        content = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "1", "Current Location": "A"},
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "9", "Current Location": "B"},
        ])

        outcome = import_inventory_file(test_db, content, "a.csv", "DC1", settings)

        assert outcome.records_processed == 2
        assert outcome.new_products == 1
        assert outcome.updated_products == 1
        assert resolve_current_quantity(test_db, "X1", "DC1") == 9
        assert test_db.get(CatalogEntry, "X1").location == "B"


# =============================================================================
# Empty batches
# =============================================================================


class TestEmptyBatch:

    def test_header_only_export_is_soft_failure(self, test_db, settings, patchcord_export, make_export):
        import_inventory_file(test_db, patchcord_export, "dc1.csv", "DC1", settings)
        ledger_before = _count(test_db, LedgerEntry)

        outcome = import_inventory_file(test_db, make_export([]), "empty.csv", "DC1", settings)

        assert outcome.status == ImportStatus.NO_VALID_RECORDS
        assert not outcome.success
        assert outcome.error == NO_VALID_RECORDS_MESSAGE
        assert _count(test_db, LedgerEntry) == ledger_before
        assert _count(test_db, ImportRecord) == 1
        assert resolve_current_quantity(test_db, "X1", "DC1") == 15

    def test_reconcile_rejects_empty_batch(self, test_db, settings):
        with pytest.raises(EmptyBatchError):
            reconcile_inventory(test_db, [], "empty.csv", "DC1", settings)

        assert _count(test_db, LedgerEntry) == 0

    def test_unreadable_export(self, test_db, settings):
        outcome = import_inventory_file(test_db, b"MSF,Item Name\n\xff\xfe,x\n", "bad.csv", "DC1", settings)

        assert outcome.status == ImportStatus.UNREADABLE
        assert outcome.error
        assert _count(test_db, ImportRecord) == 0


# =============================================================================
# Datacenter scopes
# =============================================================================


class TestDatacenterIsolation:

    def test_import_never_touches_other_scopes(self, test_db, settings, make_export):
        dc1 = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "15"}])
        dc2 = make_export([{"MSF": "X2", "Item Name": "CAT6 2M", "OnHand Quantity": "5"}])

        import_inventory_file(test_db, dc1, "dc1.csv", "DC1", settings)
        import_inventory_file(test_db, dc2, "dc2.csv", "DC2", settings)

        assert resolve_current_quantity(test_db, "X1", "DC1") == 15
        assert resolve_current_quantity(test_db, "X1", "DC2") == 0
        assert resolve_current_quantity(test_db, "X2", "DC2") == 5
        assert resolve_current_quantity(test_db, "X2", "DC1") == 0

        dc2_rows = test_db.scalars(
            select(LedgerEntry).where(LedgerEntry.source_file.like("dc2.csv%"))
        ).all()
        assert {row.datacenter for row in dc2_rows} == {"DC2"}

    def test_catalog_is_shared_across_datacenters(self, test_db, settings, make_export):
        content = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "2"}])

        import_inventory_file(test_db, content, "dc1.csv", "DC1", settings)
        outcome = import_inventory_file(test_db, content, "dc2.csv", "DC2", settings)

        assert outcome.new_products == 0
        assert outcome.updated_products == 1
        assert _count(test_db, CatalogEntry) == 1

    def test_unscoped_import_is_its_own_scope(self, test_db, settings, make_export):
        content = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "4"}])
        empty_dc1 = make_export([{"MSF": "X9", "Item Name": "CAT6 9M", "OnHand Quantity": "1"}])

        import_inventory_file(test_db, content, "legacy.csv", "", settings)
        import_inventory_file(test_db, empty_dc1, "dc1.csv", "DC1", settings)

        assert resolve_current_quantity(test_db, "X1", "") == 4
        assert resolve_current_quantity(test_db, "X1", "DC1") == 0

    def test_pass_stamps_after_newest_ledger_row(self, test_db, settings, make_export):
        first = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"}])
        second = make_export([{"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "7"}])
        import_inventory_file(test_db, first, "first.csv", "DC1", settings)

        # A row stamped ahead of this host's wall clock, e.g. by another server.
        ledger_repo.append_entry(
            test_db,
            msf="X1",
            quantity=99,
            datacenter="DC1",
            source_file="skewed.csv",
            import_timestamp=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        test_db.commit()

        import_inventory_file(test_db, second, "second.csv", "DC1", settings)

        assert resolve_current_quantity(test_db, "X1", "DC1") == 7
        newest = ledger_repo.get_latest_entry(test_db, "X1", "DC1")
        assert newest.source_file == "second.csv"


# =============================================================================
# Attribute monotonicity
# =============================================================================


def test_known_attributes_survive_vaguer_description(test_db, settings, make_export):
    first = make_export([{"MSF": "X1", "Item Name": "400G AOC 7M QSFP-DD", "OnHand Quantity": "1"}])
    second = make_export([{"MSF": "X1", "Item Name": "ACTIVE CABLE", "OnHand Quantity": "1"}])

    import_inventory_file(test_db, first, "a.csv", "DC1", settings)
    import_inventory_file(test_db, second, "b.csv", "DC1", settings)

    entry = test_db.get(CatalogEntry, "X1")
    assert entry.item_name == "ACTIVE CABLE"
    assert entry.cable_type == "AOC"
    assert entry.cable_length == "7M"
    assert entry.cable_length_value == 7.0
    assert entry.cable_length_unit == "M"
    assert entry.speed == "400G"
    assert entry.connector_type == "QSFP-DD"


# =============================================================================
# Atomicity
# =============================================================================


class TestRollback:

    def test_failure_mid_pass_persists_nothing(self, test_db, settings, make_export, monkeypatch):
        seed = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "3"},
            {"MSF": "X2", "Item Name": "CAT6 2M", "OnHand Quantity": "4"},
        ])
        import_inventory_file(test_db, seed, "seed.csv", "DC1", settings)
        before = _snapshot(test_db)

        real_append = ledger_repo.append_entry
        calls = {"n": 0}

        def failing_append(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 3:
                raise RuntimeError("disk full")
            return real_append(*args, **kwargs)

        monkeypatch.setattr(ledger_repo, "append_entry", failing_append)

        batch = make_export([
            {"MSF": "X1", "Item Name": "CAT6 1M", "OnHand Quantity": "30"},
            {"MSF": "X3", "Item Name": "400G AOC 7M", "OnHand Quantity": "1"},
            {"MSF": "X2", "Item Name": "CAT6 2M", "OnHand Quantity": "40"},
        ])
        outcome = import_inventory_file(test_db, batch, "batch.csv", "DC1", settings)

        assert outcome.status == ImportStatus.FAILED
        assert "disk full" in outcome.error
        assert _snapshot(test_db) == before
        assert test_db.get(CatalogEntry, "X3") is None
        assert resolve_current_quantity(test_db, "X1", "DC1") == 3

    def test_reconcile_raises_single_error(self, test_db, settings, monkeypatch):
        def failing_append(*args, **kwargs):
            raise RuntimeError("constraint violated")

        monkeypatch.setattr(ledger_repo, "append_entry", failing_append)
        records = parse_inventory_csv("MSF,Item Name,OnHand Quantity\nX1,CAT6 1M,4\n")

        with pytest.raises(ReconciliationFailedError) as exc_info:
            reconcile_inventory(test_db, records, "a.csv", "DC1", settings)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert _count(test_db, CatalogEntry) == 0
