from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from drawings.exceptions import BlockNotFound, FileNotFound
from drawings.extraction import BlockCandidate
from drawings.models import BlockRecord, UploadedFile
from drawings.stores import BlockStore, FileLifecycleStore

Status = UploadedFile.Status

pytestmark = pytest.mark.django_db


def candidate(name, x=0.0, y=0.0, z=0.0, layer="0"):
    return BlockCandidate(name=name, layer=layer, coordinates={"x": x, "y": y, "z": z})


def make_file(name="plan.dxf", status=Status.PROCESSING):
    record = FileLifecycleStore().create(original_name=name, stored_file_name=f"stored-{name}")
    if status != Status.PROCESSING:
        UploadedFile.objects.filter(pk=record.pk).update(status=status)
        record.refresh_from_db()
    return record


class TestFileLifecycleStore:
    def test_create_starts_processing(self):
        record = make_file()

        assert record.status == Status.PROCESSING
        assert not record.is_terminal

    @pytest.mark.parametrize("terminal", [Status.COMPLETED, Status.FAILED])
    def test_set_status_moves_processing_to_terminal(self, terminal):
        record = make_file()

        assert FileLifecycleStore().set_status(record.id, terminal) is True
        record.refresh_from_db()
        assert record.status == terminal
        assert record.is_terminal

    def test_set_status_does_not_touch_terminal_rows(self):
        record = make_file(status=Status.FAILED)

        assert FileLifecycleStore().set_status(record.id, Status.COMPLETED) is False
        record.refresh_from_db()
        assert record.status == Status.FAILED

    def test_set_status_unknown_id(self):
        assert FileLifecycleStore().set_status(999999, Status.FAILED) is False

    def test_set_status_rejects_processing(self):
        record = make_file()

        with pytest.raises(ValueError):
            FileLifecycleStore().set_status(record.id, Status.PROCESSING)

    def test_set_status_refreshes_updated_at(self):
        record = make_file()
        before = record.updated_at

        FileLifecycleStore().set_status(record.id, Status.COMPLETED)

        record.refresh_from_db()
        assert record.updated_at >= before

    def test_get_unknown_file(self):
        with pytest.raises(FileNotFound) as excinfo:
            FileLifecycleStore().get(424242)

        assert excinfo.value.file_id == 424242

    def test_list_files_newest_first(self):
        first = make_file("a.dxf")
        second = make_file("b.dxf")

        assert [f.id for f in FileLifecycleStore().list_files()] == [second.id, first.id]

    def test_stuck_files_only_old_processing_rows(self):
        store = FileLifecycleStore()
        old = make_file("old.dxf")
        make_file("fresh.dxf")
        done = make_file("done.dxf", status=Status.COMPLETED)
        long_ago = timezone.now() - timedelta(hours=2)
        UploadedFile.objects.filter(pk__in=[old.pk, done.pk]).update(updated_at=long_ago)

        stuck = store.stuck_files(older_than=timezone.now() - timedelta(minutes=30))

        assert [f.id for f in stuck] == [old.id]


class TestBlockStore:
    def test_bulk_insert_saves_batch(self):
        record = make_file()

        saved = BlockStore().bulk_insert(record.id, [candidate("A", 1, 2, 3), candidate("B", layer=None)])

        assert saved == 2
        blocks = list(BlockRecord.objects.filter(file=record))
        assert [(b.name, b.layer) for b in blocks] == [("A", "0"), ("B", None)]
        assert blocks[0].coordinates == {"x": 1, "y": 2, "z": 3}

    def test_bulk_insert_empty_is_noop(self):
        record = make_file()

        assert BlockStore().bulk_insert(record.id, []) == 0
        assert BlockStore().count_for_file(record.id) == 0

    def test_bulk_insert_rejects_invalid_batch(self):
        record = make_file()

        with pytest.raises(ValidationError):
            BlockStore().bulk_insert(record.id, [
                candidate("A"),
                BlockCandidate(name="B", layer=None, coordinates={"y": 2.0}),
            ])

        assert BlockStore().count_for_file(record.id) == 0

    def test_query_paginates_by_name(self):
        record = make_file()
        BlockStore().bulk_insert(record.id, [candidate(name) for name in "EDCBA"])

        page = BlockStore().query(page=2, limit=2)

        assert page.total == 5
        assert page.total_pages == 3
        assert [b.name for b in page.results] == ["C", "D"]

    def test_query_past_last_page_is_empty(self):
        record = make_file()
        BlockStore().bulk_insert(record.id, [candidate("A")])

        page = BlockStore().query(page=4, limit=10)

        assert page.total == 1
        assert page.results == []

    def test_query_filters_by_file(self):
        first, second = make_file("one.dxf"), make_file("two.dxf")
        BlockStore().bulk_insert(first.id, [candidate("A"), candidate("B")])
        BlockStore().bulk_insert(second.id, [candidate("C")])

        page = BlockStore().query(file_id=second.id)

        assert page.total == 1
        assert page.results[0].name == "C"

    def test_search_is_case_insensitive_substring(self):
        first, second = make_file("one.dxf"), make_file("two.dxf")
        BlockStore().bulk_insert(first.id, [candidate("Door_Single"), candidate("WINDOW")])
        BlockStore().bulk_insert(second.id, [candidate("BIG_DOOR")])

        assert [b.name for b in BlockStore().search("door")] == ["BIG_DOOR", "Door_Single"]
        assert [b.name for b in BlockStore().search("DOOR", file_id=first.id)] == ["Door_Single"]

    def test_get_unknown_block(self):
        with pytest.raises(BlockNotFound):
            BlockStore().get(31337)

    def test_blocks_removed_with_their_file(self):
        record = make_file()
        BlockStore().bulk_insert(record.id, [candidate("A"), candidate("B")])

        record.delete()

        assert not BlockRecord.objects.exists()


class TestCoordinateValidation:
    @pytest.mark.parametrize("coordinates", [{"x": 1}, [1, 2, 3], "1,2"])
    def test_rejects_incomplete_coordinates(self, coordinates):
        block = BlockRecord(file=make_file(), name="A", coordinates=coordinates)

        with pytest.raises(ValidationError):
            block.full_clean()

    def test_accepts_missing_z(self):
        BlockRecord(file=make_file(), name="A", coordinates={"x": 1, "y": 2}).full_clean()
