from __future__ import annotations


class InkpressError(Exception):
    pass


class ConfigError(InkpressError):
    pass


class ContentError(InkpressError):
    pass


class PostConflictError(InkpressError):
    def __init__(self, conflicts: dict) -> None:
        self.conflicts = conflicts
        urls = ", ".join(sorted(conflicts))
        super().__init__(f"Generating would cause a conflict: {urls}")
