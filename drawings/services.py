# drawings/services.py

import logging
import os
import uuid
from pathlib import Path

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile as DjangoUploadedFile
from rest_framework.exceptions import NotFound, ValidationError

from .dispatch import get_dispatcher
from .exceptions import BlockNotFound, FileNotFound
from .models import BlockRecord, UploadedFile
from .stores import BlockPage, BlockStore, FileLifecycleStore
from .uploads import upload_storage

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ('.dxf',)


class DrawingService:
    """
    Service layer behind the REST API: accepts uploads, schedules their
    ingestion and serves the stored files and blocks.
    """

    def __init__(self, file_store=None, block_store=None, dispatcher=None):
        self.file_store = file_store or FileLifecycleStore()
        self.block_store = block_store or BlockStore()
        self._dispatcher = dispatcher

    @property
    def dispatcher(self):
        return self._dispatcher or get_dispatcher()

    def accept_upload(self, *, file_obj: DjangoUploadedFile) -> UploadedFile:
        # 1. Only keep the basename; the client name may carry path characters.
        safe_filename = os.path.basename(file_obj.name or '')
        self._validate_upload(safe_filename, file_obj.size)

        # 2. Save the bytes under a unique name so parallel uploads never collide.
        #    The storage may adjust the name; the returned one is authoritative.
        storage = upload_storage()
        stored_file_name = storage.save(f"{uuid.uuid4().hex}-{safe_filename}", file_obj)
        file_path = Path(storage.path(stored_file_name))

        # 3. The row must exist in 'processing' before ingestion is scheduled.
        try:
            record = self.file_store.create(
                original_name=safe_filename,
                stored_file_name=stored_file_name,
            )
        except Exception:
            logger.error(f"Could not register upload '{safe_filename}'; removing stored file.", exc_info=True)
            storage.delete(stored_file_name)
            raise

        # 4. Hand over to the worker pool without waiting for the result.
        try:
            self.dispatcher.submit(file_path, record.id)
        except Exception:
            logger.error(f"[file {record.id}] Could not schedule ingestion; removing upload.", exc_info=True)
            record.delete()
            storage.delete(stored_file_name)
            raise
        logger.info(f"[file {record.id}] Upload '{safe_filename}' accepted, processing started.")
        return record

    def _validate_upload(self, filename: str, size: int):
        if not filename:
            raise ValidationError("No file uploaded. Make sure the form field name is 'file'.")
        if not filename.lower().endswith(ALLOWED_EXTENSIONS):
            raise ValidationError("Invalid file type. Only .dxf files are allowed.")
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        if size is not None and size > max_bytes:
            raise ValidationError(f"File too large. The limit is {settings.MAX_UPLOAD_SIZE_MB} MB.")

    def list_files(self):
        return self.file_store.list_files()

    def get_file(self, file_id) -> UploadedFile:
        try:
            return self.file_store.get(file_id)
        except FileNotFound:
            raise NotFound("File not found")

    def list_blocks(self, *, file_id=None, page: int = 1, limit: int = 10) -> BlockPage:
        return self.block_store.query(file_id=file_id, page=page, limit=limit)

    def search_blocks(self, *, query: str, file_id=None) -> list:
        return self.block_store.search(query, file_id=file_id)

    def get_block(self, block_id) -> BlockRecord:
        try:
            return self.block_store.get(block_id)
        except BlockNotFound as e:
            raise NotFound(str(e))
