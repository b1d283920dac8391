"""
Adapters for the external collaborators of the pipeline.
"""

from src.course_quiz_generator.storage.json_store import (
    JsonAttemptStore,
    JsonCourseRegistry,
    JsonQuizStore,
)
from src.course_quiz_generator.storage.materials import (
    DirectoryMaterialLocator,
    LocalBlobFetcher,
    parse_blob_reference,
)

__all__ = [
    "JsonAttemptStore",
    "JsonCourseRegistry",
    "JsonQuizStore",
    "DirectoryMaterialLocator",
    "LocalBlobFetcher",
    "parse_blob_reference",
]
