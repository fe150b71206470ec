class StorageError(Exception):
    """Custom exception for alias/registry persistence errors."""

    pass


class AliasFileError(StorageError):
    """An alias layer exists but is not a category -> raw -> canonical mapping."""

    pass


class AuditLogError(StorageError):
    """Exception raised when an audit or registration log cannot be written."""

    pass
