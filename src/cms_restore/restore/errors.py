"""Restore error hierarchy.

Lookup, state and content errors are raised while reading the snapshot,
before anything is written.  ``EntityWriteError`` is raised mid-pass and
means the store holds a partial merge up to the failing entity.
"""


class RestoreError(Exception):
    """Base class for every error raised by the restore engine."""


class BackupNotFoundError(RestoreError):
    """No backup record has the requested identity."""

    def __init__(self, backup_id: int) -> None:
        self.backup_id = backup_id
        super().__init__(f"Backup not found: {backup_id}")


class InvalidBackupStateError(RestoreError):
    """The backup record is not in the ``completed`` state."""

    def __init__(self, backup_id: int, status: str) -> None:
        self.backup_id = backup_id
        self.status = status
        super().__init__(
            f"Can only restore completed backups (backup {backup_id} is {status})"
        )


class MissingContentError(RestoreError):
    """The backup record carries no content payload."""

    def __init__(self, backup_id: int) -> None:
        self.backup_id = backup_id
        super().__init__(f"Backup content not found in database (backup {backup_id})")


class MalformedSnapshotError(RestoreError):
    """The payload cannot be parsed into a snapshot envelope."""


class EntityWriteError(RestoreError):
    """A single entity upsert failed; the restore pass stopped there."""

    def __init__(self, kind: str, entity_id: int | None, cause: Exception) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"Failed to restore {kind} id={entity_id}: {cause}")
