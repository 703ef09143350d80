"""Exceptions raised by the ingestion pipeline and the drawing stores."""

PARSING_FAILURE_PREFIX = "DXF parsing failed:"


class IngestionError(Exception):
    """Base class for failures that end an ingestion run in the Failed state."""


class ResourceReadError(IngestionError):
    """The uploaded file could not be read (missing, unreadable or not text)."""


class DxfParsingError(IngestionError):
    """The DXF parser rejected the document.

    The message always starts with ``"DXF parsing failed:"`` whatever the
    underlying cause; the parser's own message is kept in ``diagnostic``.
    """

    def __init__(self, diagnostic: str):
        self.diagnostic = diagnostic
        super().__init__(f"{PARSING_FAILURE_PREFIX} {diagnostic}")


class PersistenceFailure(IngestionError):
    """The transaction saving the blocks and the Completed status was rolled back."""


class FileNotFound(Exception):
    def __init__(self, file_id):
        self.file_id = file_id
        super().__init__(f"File with ID {file_id} not found.")


class BlockNotFound(Exception):
    def __init__(self, block_id):
        self.block_id = block_id
        super().__init__(f"Block with ID {block_id} not found.")
