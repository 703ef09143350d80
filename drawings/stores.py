# drawings/stores.py

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

from django.db import transaction
from django.utils import timezone

from .exceptions import BlockNotFound, FileNotFound
from .extraction import BlockCandidate
from .models import BlockRecord, UploadedFile


class FileLifecycleStore:
    """
    Persistence for UploadedFile rows and their processing status.
    Status writes only ever move a Processing row to a terminal state.
    """

    def create(self, *, original_name: str, stored_file_name: str) -> UploadedFile:
        return UploadedFile.objects.create(
            original_name=original_name,
            stored_file_name=stored_file_name,
            status=UploadedFile.Status.PROCESSING,
        )

    def set_status(self, file_id, status: str) -> bool:
        """
        Conditional single-row update: Processing -> status.
        Returns False when no Processing row with this id exists, which covers
        both an unknown id and a file that already reached a terminal state.
        """
        if status not in UploadedFile.TERMINAL_STATUSES:
            raise ValueError(f"'{status}' is not a terminal file status.")
        # .update() bypasses auto_now
        updated = UploadedFile.objects.filter(
            pk=file_id, status=UploadedFile.Status.PROCESSING
        ).update(status=status, updated_at=timezone.now())
        return updated == 1

    def get(self, file_id) -> UploadedFile:
        try:
            return UploadedFile.objects.get(pk=file_id)
        except UploadedFile.DoesNotExist:
            raise FileNotFound(file_id)

    def list_files(self):
        return UploadedFile.objects.all().order_by('-created_at', '-id')

    def stuck_files(self, *, older_than: datetime):
        """Processing rows that have not been touched since `older_than`."""
        return UploadedFile.objects.filter(
            status=UploadedFile.Status.PROCESSING,
            updated_at__lt=older_than,
        ).order_by('updated_at')


@dataclass
class BlockPage:
    total: int
    page: int
    limit: int
    total_pages: int
    results: List[BlockRecord]


class BlockStore:
    """Persistence and lookup for extracted BlockRecord rows."""

    def bulk_insert(self, file_id, candidates: Iterable[BlockCandidate]) -> int:
        """
        Inserts a whole batch or nothing. Joins the caller's transaction when
        one is open. Raises ValidationError before writing if any record is
        invalid.
        """
        records = [
            BlockRecord(
                file_id=file_id,
                name=candidate.name,
                layer=candidate.layer,
                coordinates=dict(candidate.coordinates),
            )
            for candidate in candidates
        ]
        if not records:
            return 0
        # bulk_create skips field validators
        for record in records:
            record.full_clean(exclude=['file'])
        with transaction.atomic():
            BlockRecord.objects.bulk_create(records)
        return len(records)

    def query(self, *, file_id=None, page: int = 1, limit: int = 10) -> BlockPage:
        queryset = BlockRecord.objects.select_related('file').order_by('name', 'id')
        if file_id:
            queryset = queryset.filter(file_id=file_id)

        total = queryset.count()
        offset = (page - 1) * limit
        results = list(queryset[offset:offset + limit])
        return BlockPage(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
            results=results,
        )

    def search(self, pattern: str, *, file_id=None) -> List[BlockRecord]:
        queryset = BlockRecord.objects.select_related('file').filter(name__icontains=pattern.strip())
        if file_id:
            queryset = queryset.filter(file_id=file_id)
        return list(queryset.order_by('name', 'id'))

    def get(self, block_id) -> BlockRecord:
        try:
            return BlockRecord.objects.select_related('file').get(pk=block_id)
        except BlockRecord.DoesNotExist:
            raise BlockNotFound(block_id)

    def count_for_file(self, file_id) -> int:
        return BlockRecord.objects.filter(file_id=file_id).count()

