# drawings/ingestion.py

import logging
import os
from typing import Callable, List, Optional

from django.db import transaction

from .exceptions import IngestionError, PersistenceFailure, ResourceReadError
from .extraction import BlockCandidate, extract_blocks
from .models import UploadedFile
from .stores import BlockStore, FileLifecycleStore
from .uploads import upload_storage

logger = logging.getLogger(__name__)

Status = UploadedFile.Status


class IngestionService:
    """
    Drives one uploaded DXF file from Processing to a terminal state.

    Steps run strictly in order: read -> extract -> persist -> finalize, and
    the temporary upload is removed afterwards whatever happened. The service
    is the end of the error chain: nothing raised by a run leaves `ingest()`,
    the outcome is only visible through the file's status and the logs.
    """

    def __init__(
        self,
        file_store: Optional[FileLifecycleStore] = None,
        block_store: Optional[BlockStore] = None,
        extractor: Callable[[str], List[BlockCandidate]] = extract_blocks,
    ):
        self.file_store = file_store or FileLifecycleStore()
        self.block_store = block_store or BlockStore()
        self.extractor = extractor

    def ingest(self, file_path, file_id) -> None:
        self._run(file_path, file_id)

    def _run(self, file_path, file_id) -> str:
        """
        Executes one run and returns the status it wrote, or Processing when
        no terminal write happened (the stuck state).
        """
        file_path = os.fspath(file_path)
        tag = f"[file {file_id}]"
        final_status = Status.PROCESSING
        logger.info(f"{tag} Starting processing, path: {file_path}")

        try:
            try:
                content = self._read(file_path)
                candidates = self.extractor(content)
                self._persist(file_id, candidates, tag)
                final_status = Status.COMPLETED
            except IngestionError as e:
                logger.error(f"{tag} Error processing file: {e}")
                final_status = self._mark_failed(file_id, tag)
            except Exception as e:
                logger.error(f"{tag} Unexpected error processing file: {e}", exc_info=True)
                final_status = self._mark_failed(file_id, tag)
        finally:
            self._cleanup(file_path, tag)

        logger.info(f"{tag} Processing finished with status '{final_status}'.")
        return final_status

    def _read(self, file_path: str) -> str:
        try:
            with open(file_path, 'r', encoding='utf-8', errors='replace') as handle:
                return handle.read()
        except OSError as e:
            raise ResourceReadError(f"Could not read uploaded file '{file_path}': {e}") from e

    def _persist(self, file_id, candidates: List[BlockCandidate], tag: str) -> None:
        """
        Saves the blocks and flips the status to Completed in one transaction.
        Either both writes commit or neither does.
        """
        try:
            with transaction.atomic():
                if candidates:
                    saved = self.block_store.bulk_insert(file_id, candidates)
                    logger.info(f"{tag} Saved {saved} blocks.")
                else:
                    logger.info(f"{tag} 0 block inserts found to save.")

                if not self.file_store.set_status(file_id, Status.COMPLETED):
                    # Rolls back the inserts above.
                    raise PersistenceFailure(f"File {file_id} is not in the processing state.")
            logger.info(f"{tag} File status updated to 'completed'.")
        except PersistenceFailure:
            raise
        except Exception as e:
            raise PersistenceFailure(f"Could not save blocks for file {file_id}: {e}") from e

    def _mark_failed(self, file_id, tag: str) -> str:
        """
        Independent status write outside any failed transaction. Not retried;
        when it fails the row stays Processing for external reconciliation.
        """
        try:
            updated = self.file_store.set_status(file_id, Status.FAILED)
        except Exception as e:
            logger.error(
                f"{tag} Failed to update file status to 'failed'; file left in 'processing': {e}",
                exc_info=True,
            )
            return Status.PROCESSING

        if not updated:
            logger.warning(f"{tag} No processing row to mark as 'failed'.")
            return Status.PROCESSING
        logger.info(f"{tag} File status updated to 'failed'.")
        return Status.FAILED

    def _cleanup(self, file_path: str, tag: str) -> None:
        # A file that is already gone counts as cleaned up.
        directory, name = os.path.split(file_path)
        try:
            upload_storage(directory).delete(name)
            logger.info(f"{tag} Cleaned up file: {file_path}")
        except OSError as e:
            logger.error(f"{tag} Failed to delete processed file {file_path}: {e}")


def ingest_file(file_path, file_id) -> None:
    """Runs one ingestion with the ORM-backed stores."""
    IngestionService().ingest(file_path, file_id)
