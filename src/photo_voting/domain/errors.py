"""Store error hierarchy shared by adapters and services."""


class LedgerError(Exception):
    """Base class for document store failures."""


class DocumentNotFoundError(LedgerError):
    """A mutation targeted a document that does not exist."""

    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(f"{collection}/{document_id} not found")
        self.collection = collection
        self.document_id = document_id


class DuplicateDocumentError(LedgerError):
    """A create mutation collided with an existing document."""

    def __init__(self, collection: str, document_id: str | None = None) -> None:
        target = f"{collection}/{document_id}" if document_id else collection
        super().__init__(f"{target} already exists")
        self.collection = collection
        self.document_id = document_id


class TransientStoreError(LedgerError):
    """The store was unreachable or failed in a retryable way."""
