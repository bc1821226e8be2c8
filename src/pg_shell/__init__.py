"""pg-shell: interactive PostgreSQL administration shell."""

from pg_shell.__about__ import __version__

__all__ = ["__version__"]
