import pytest

from drawings.stores import FileLifecycleStore

from .samples import build_dxf


@pytest.fixture
def my_block_dxf():
    return build_dxf(inserts=[("MY_BLOCK", (100.5, 200.75, 10.0), "LAYER_A")])


@pytest.fixture
def upload_dir(settings, tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    settings.UPLOAD_DIR = path
    return path


@pytest.fixture
def write_upload(upload_dir):
    """Writes text into the upload directory and returns its path."""
    def _write(text, name="drawing.dxf"):
        path = upload_dir / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def processing_file(db):
    return FileLifecycleStore().create(original_name="drawing.dxf", stored_file_name="abc-drawing.dxf")
