"""S3 Transfer Manager コアモジュール"""
from .s3_client import S3ClientManager
from .bucket import Bucket, StorageObject
from .executor import ParallelExecutor
from .transfer_manager import TransferManager
from .task_runner import TaskRunner

__all__ = [
    'S3ClientManager',
    'Bucket',
    'StorageObject',
    'ParallelExecutor',
    'TransferManager',
    'TaskRunner'
]
