# drawings/uploads.py

from django.conf import settings
from django.core.files.storage import FileSystemStorage


def upload_storage(location=None) -> FileSystemStorage:
    """
    Storage for uploaded drawings waiting to be ingested. Built per call so
    a changed UPLOAD_DIR is always picked up.
    """
    return FileSystemStorage(location=location or settings.UPLOAD_DIR)
