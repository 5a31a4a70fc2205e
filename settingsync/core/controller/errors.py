from __future__ import annotations


class SyncError(Exception):
    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"fail to sync setting for {key}: {cause}")
