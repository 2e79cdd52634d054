"""rcpatch: idempotent shell rc file patching with backups."""

__version__ = "0.1.0"
