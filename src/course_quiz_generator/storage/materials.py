"""
Filesystem-backed material locator and blob fetcher.
"""
import json
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from src.course_quiz_generator.models.material_models import Material
from src.course_quiz_generator import config

BLOB_URL_MARKER = "/api/files/"
BLOB_SCHEME = "blob://"
MANIFEST_FILE = "materials.json"


def parse_blob_reference(file_ref: Optional[str]) -> Optional[str]:
    """Return the blob ID for '/api/files/<id>' or 'blob://<id>' references."""
    if not file_ref:
        return None
    if file_ref.startswith(BLOB_SCHEME):
        return file_ref[len(BLOB_SCHEME):].strip("/") or None
    if BLOB_URL_MARKER in file_ref:
        return file_ref.split(BLOB_URL_MARKER, 1)[1].split("?", 1)[0].strip("/") or None
    return None


class DirectoryMaterialLocator:
    """
    List course materials from a directory per course.

    If ``<files_dir>/<course_id>/materials.json`` exists it is read as a list
    of Material records (this is how assignments and blob references are
    declared). Otherwise every non-hidden file in the course directory is a
    material: PDFs as 'pdf', anything else as 'notes'.
    """

    def __init__(self, files_dir: Optional[str] = None):
        self.files_dir = Path(files_dir or config.FILES_DIR)

    def list_materials(self, course_id: str) -> List[Material]:
        course_dir = self.files_dir / str(course_id)
        if not course_dir.is_dir():
            return []

        manifest = course_dir / MANIFEST_FILE
        if manifest.is_file():
            with open(manifest, 'r', encoding='utf-8') as f:
                return [Material.model_validate(item) for item in json.load(f)]

        materials = []
        for file_path in sorted(course_dir.iterdir()):
            if not file_path.is_file() or file_path.name.startswith('.'):
                continue
            content_type = "pdf" if file_path.suffix.lower() == ".pdf" else "notes"
            materials.append(Material(
                material_id=file_path.stem,
                title=file_path.name,
                content_type=content_type,
                file_ref=str(file_path.resolve())
            ))
        return materials


class LocalBlobFetcher:
    """Copy blobs stored as ``<blobs_dir>/<id>[.ext]`` into temporary files."""

    def __init__(self, blobs_dir: Optional[str] = None, temp_dir: Optional[str] = None):
        self.blobs_dir = Path(blobs_dir or config.BLOBS_DIR)
        self.temp_dir = Path(temp_dir or config.TEMP_DIR)

    def _find_blob(self, blob_id: str) -> Path:
        exact = self.blobs_dir / blob_id
        if exact.is_file():
            return exact
        matches = sorted(self.blobs_dir.glob(f"{blob_id}.*"))
        if not matches:
            raise FileNotFoundError(f"Blob not found: {blob_id}")
        return matches[0]

    def fetch_to_local_file(self, file_ref: str) -> str:
        blob_id = parse_blob_reference(file_ref)
        if not blob_id:
            raise ValueError(f"Not a blob reference: {file_ref}")

        blob_path = self._find_blob(blob_id)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

        with open(blob_path, 'rb') as src:
            dst = tempfile.NamedTemporaryFile(
                mode='wb', dir=self.temp_dir, prefix=f"{blob_id}_",
                suffix=blob_path.suffix, delete=False)
            try:
                with dst:
                    shutil.copyfileobj(src, dst)
            except BaseException:
                Path(dst.name).unlink(missing_ok=True)
                raise
        return dst.name

    def delete_local_file(self, local_path: str) -> None:
        Path(local_path).unlink(missing_ok=True)
