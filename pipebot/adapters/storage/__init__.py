"""Storage adapters."""

from pipebot.adapters.storage.delimited_store import DelimitedStorage

__all__ = ["DelimitedStorage"]
