# drawings/management/commands/ingest_drawing.py

import uuid
from pathlib import Path

from django.core.files import File
from django.core.management.base import BaseCommand, CommandError

from drawings.ingestion import IngestionService
from drawings.stores import BlockStore, FileLifecycleStore
from drawings.uploads import upload_storage


class Command(BaseCommand):
    """
    Registers a DXF file from local disk and ingests it in the foreground.
    The source file is copied into the upload storage first, since ingestion
    removes its input when done.
    """
    help = 'Ingests a local DXF file and prints the resulting status.'

    def add_arguments(self, parser):
        parser.add_argument('path', help="Path of the DXF file to ingest.")

    def handle(self, *args, **options):
        source = Path(options['path'])
        if not source.is_file():
            raise CommandError(f"File not found: {source}")

        file_store = FileLifecycleStore()
        block_store = BlockStore()

        storage = upload_storage()
        with open(source, 'rb') as handle:
            stored_file_name = storage.save(f"{uuid.uuid4().hex}-{source.name}", File(handle))
        target = Path(storage.path(stored_file_name))

        record = file_store.create(original_name=source.name, stored_file_name=stored_file_name)
        self.stdout.write(f"Registered file {record.id} ({source.name}). Ingesting...")

        IngestionService(file_store=file_store, block_store=block_store).ingest(target, record.id)

        record.refresh_from_db()
        blocks = block_store.count_for_file(record.id)
        message = f"File {record.id} finished with status '{record.status}' ({blocks} blocks)."
        if record.status == record.Status.COMPLETED:
            self.stdout.write(self.style.SUCCESS(message))
        else:
            self.stdout.write(self.style.ERROR(message))
