"""Resource-name helpers: document id extraction and name resolution.

Resource names look like
``projects/{project}/databases/{database}/documents/{collection}/{doc}``.
"""
from __future__ import annotations
from typing import Any

DEFAULT_DATABASE_ID = "(default)"


class InvalidResourceNameError(ValueError):
    """Raised when a resource name or document path is malformed."""
    pass


def get_document_id(name: Any) -> str:
    """Return the last path segment of *name* (everything after the last ``/``)."""
    if not isinstance(name, str) or not name:
        raise InvalidResourceNameError(f"Invalid resource name: {name!r}")
    doc_id = name.rsplit("/", 1)[-1]
    if not doc_id:
        raise InvalidResourceNameError(f"Resource name has no document id: {name!r}")
    return doc_id


class PathUtil:
    def __init__(self, project_id: str, database_id: str = DEFAULT_DATABASE_ID):
        if not project_id:
            raise InvalidResourceNameError("project_id is required")
        self.project_id = project_id
        self.database_id = database_id or DEFAULT_DATABASE_ID

    @property
    def database_root(self) -> str:
        return f"projects/{self.project_id}/databases/{self.database_id}"

    @property
    def documents_root(self) -> str:
        return f"{self.database_root}/documents"

    def get_document_name(self, path: str) -> str:
        """Resolve a document path (``users/alice``) to its full resource name."""
        if not isinstance(path, str):
            raise InvalidResourceNameError(f"Invalid document path: {path!r}")
        path = path.strip("/")
        if not path:
            raise InvalidResourceNameError("Document path is empty")
        # 이미 정규화된 이름은 그대로
        if path.startswith("projects/"):
            return path
        return f"{self.documents_root}/{path}"

    def __repr__(self) -> str:
        return f"PathUtil(project_id={self.project_id!r}, database_id={self.database_id!r})"
