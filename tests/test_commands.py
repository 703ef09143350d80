from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from drawings.management.commands.reconcile_stuck_files import reconcile_stuck_files
from drawings.models import BlockRecord, UploadedFile
from drawings.stores import FileLifecycleStore

from .samples import INVALID_DXF

Status = UploadedFile.Status

pytestmark = pytest.mark.django_db


def file_touched(minutes_ago, name, status=Status.PROCESSING):
    record = FileLifecycleStore().create(original_name=name, stored_file_name=f"stored-{name}")
    UploadedFile.objects.filter(pk=record.pk).update(
        status=status,
        updated_at=timezone.now() - timedelta(minutes=minutes_ago),
    )
    return record


class TestReconcileStuckFiles:
    def test_fails_only_old_processing_rows(self):
        stuck = file_touched(120, "stuck.dxf")
        fresh = file_touched(1, "fresh.dxf")
        done = file_touched(120, "done.dxf", status=Status.COMPLETED)

        assert reconcile_stuck_files(older_than_minutes=30) == [stuck.id]

        statuses = dict(UploadedFile.objects.values_list("id", "status"))
        assert statuses == {stuck.id: Status.FAILED, fresh.id: Status.PROCESSING, done.id: Status.COMPLETED}

    def test_dry_run_changes_nothing(self):
        stuck = file_touched(120, "stuck.dxf")

        assert reconcile_stuck_files(older_than_minutes=30, dry_run=True) == [stuck.id]

        stuck.refresh_from_db()
        assert stuck.status == Status.PROCESSING

    def test_nothing_to_do(self):
        assert reconcile_stuck_files(older_than_minutes=30) == []

    def test_command_output(self):
        stuck = file_touched(90, "stuck.dxf")
        out = StringIO()

        call_command("reconcile_stuck_files", "--older-than-minutes", "60", stdout=out)

        assert "Reconciled 1 stuck file(s)." in out.getvalue()
        assert f"file {stuck.id}" in out.getvalue()


class TestIngestDrawing:
    def test_ingests_local_file_and_keeps_the_source(self, tmp_path, upload_dir, my_block_dxf):
        source = tmp_path / "site.dxf"
        source.write_text(my_block_dxf, encoding="utf-8")
        out = StringIO()

        call_command("ingest_drawing", str(source), stdout=out)

        record = UploadedFile.objects.get()
        assert record.original_name == "site.dxf"
        assert record.status == Status.COMPLETED
        assert BlockRecord.objects.filter(file=record).count() == 1
        assert "status 'completed' (1 blocks)" in out.getvalue()
        assert source.exists()
        assert list(upload_dir.iterdir()) == []

    def test_reports_failed_ingestion(self, tmp_path, upload_dir):
        source = tmp_path / "broken.dxf"
        source.write_text(INVALID_DXF, encoding="utf-8")
        out = StringIO()

        call_command("ingest_drawing", str(source), stdout=out)

        assert UploadedFile.objects.get().status == Status.FAILED
        assert "status 'failed'" in out.getvalue()

    def test_missing_source(self, tmp_path, upload_dir):
        with pytest.raises(CommandError):
            call_command("ingest_drawing", str(tmp_path / "nope.dxf"))
