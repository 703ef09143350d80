from django.core.exceptions import ValidationError
from django.db import models


class UploadedFile(models.Model):
    """An uploaded DXF file and the state of its ingestion run."""
    class Status(models.TextChoices):
        PROCESSING = 'processing', 'Processing'
        COMPLETED = 'completed', 'Completed'
        FAILED = 'failed', 'Failed'

    TERMINAL_STATUSES = (Status.COMPLETED, Status.FAILED)

    original_name = models.CharField(max_length=255, help_text="File name as sent by the client.")
    stored_file_name = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique name of the temporary copy inside UPLOAD_DIR."
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PROCESSING,
        db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.original_name} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


def validate_coordinates(value):
    # z is optional in the source drawing, x and y are not
    if not isinstance(value, dict) or 'x' not in value or 'y' not in value:
        raise ValidationError("Coordinates must be an object with at least x and y properties.")


class BlockRecord(models.Model):
    """A single block INSERT found in an uploaded drawing."""
    file = models.ForeignKey(UploadedFile, on_delete=models.CASCADE, related_name='blocks')
    name = models.CharField(max_length=255, db_index=True, help_text="Name of the block definition being placed.")
    layer = models.CharField(max_length=255, null=True, blank=True)
    coordinates = models.JSONField(validators=[validate_coordinates])

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name', 'id']

    def __str__(self):
        return f"Block {self.name} in file {self.file_id}"
