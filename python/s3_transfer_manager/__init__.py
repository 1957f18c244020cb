"""S3 Transfer Manager パッケージ"""
from typing import Tuple
from .models.config import Config
from .models.options import (
    DownloadManyOptions,
    LargeFileDownloadOptions,
    UploadManyOptions,
)
from .utils.logger import LoggerManager
from .core.bucket import Bucket, StorageObject
from .core.task_runner import TaskRunner
from .core.transfer_manager import TransferManager
from .exceptions import (
    ObjectNotFoundError,
    PreconditionFailedError,
    StorageError,
    TransferCancelledError,
    TransferManagerError,
    TransferTimeoutError,
)


class S3TransferApp:
    """設定ファイルの転送タスクを実行するアプリケーション"""

    def __init__(self, config_path: str = "config.json"):
        self.config = Config.from_file(config_path)

        self.logger = LoggerManager.setup(self.config.logging)
        self.logger.info("S3 Transfer Manager initialized")

        self.task_runner = TaskRunner(self.config)

    def run(self) -> Tuple[int, int]:
        """転送タスクを実行"""
        self.logger.info("Starting S3 transfer process...")
        return self.task_runner.run_all_tasks()


__all__ = [
    'S3TransferApp',
    'Config',
    'TransferManager',
    'Bucket',
    'StorageObject',
    'UploadManyOptions',
    'DownloadManyOptions',
    'LargeFileDownloadOptions',
    'TransferManagerError',
    'StorageError',
    'PreconditionFailedError',
    'ObjectNotFoundError',
    'TransferCancelledError',
    'TransferTimeoutError',
]
