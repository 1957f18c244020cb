"""転送処理の例外クラス"""
from typing import Optional


class TransferManagerError(Exception):
    """転送処理の基底例外"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class StorageError(TransferManagerError):
    """ストレージ呼び出しの失敗"""


class PreconditionFailedError(StorageError):
    """前提条件（ifGenerationMatch など）を満たさなかった"""


class ObjectNotFoundError(StorageError):
    """オブジェクトが存在しない"""


class TransferCancelledError(TransferManagerError):
    """キャンセル済みのためタスクを開始しなかった"""


class TransferTimeoutError(TransferManagerError):
    """期限切れのためタスクを開始しなかった"""
