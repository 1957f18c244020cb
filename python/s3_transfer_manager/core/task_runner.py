"""設定ファイルの転送タスクを実行"""
import os
from typing import List, Optional, Tuple

from ..models.config import TransferTask, Config
from ..models.options import (
    DownloadManyOptions,
    LargeFileDownloadOptions,
    UploadManyOptions,
)
from ..utils.logger import LoggerManager
from ..utils.file_utils import FileScanner
from .s3_client import S3ClientManager
from .transfer import TransferConfigManager
from .transfer_manager import TransferManager


class TaskRunner:
    """転送タスクを順番に実行"""

    def __init__(self, config: Config, client_manager: Optional[S3ClientManager] = None):
        self.config = config
        self.logger = LoggerManager.get_logger()

        self.client_manager = client_manager or S3ClientManager(config.aws)
        self.transfer_config = TransferConfigManager.create_config(config.options)
        self.file_scanner = FileScanner(config.options.exclude_patterns)

    def run_all_tasks(self) -> Tuple[int, int]:
        """全てのタスクを実行"""
        total_tasks = len(self.config.transfer_tasks)
        successful_tasks = 0
        failed_tasks = 0

        self.logger.info(f"Starting transfer tasks: {total_tasks} tasks to process")

        for i, task in enumerate(self.config.transfer_tasks, 1):
            if not task.enabled:
                self.logger.info(f"Skipping disabled task: {task.name}")
                continue

            self.logger.info(f"Task {i}/{total_tasks}: Starting '{task.name}' ({task.kind})")

            try:
                success = self._run_single_task(task)
                if success:
                    successful_tasks += 1
                    self.logger.info(f"Task {i}/{total_tasks}: '{task.name}' completed successfully")
                else:
                    failed_tasks += 1
                    self.logger.error(f"Task {i}/{total_tasks}: '{task.name}' failed")
            except Exception as e:
                failed_tasks += 1
                self.logger.error(f"Task {i}/{total_tasks}: '{task.name}' failed with error: {e}")

        self.logger.info(
            f"Transfer tasks completed: {successful_tasks} successful, {failed_tasks} failed"
        )
        return successful_tasks, failed_tasks

    def _run_single_task(self, task: TransferTask) -> bool:
        """単一タスクを実行"""
        bucket = self.client_manager.get_bucket(task.bucket, self.transfer_config)
        manager = TransferManager(bucket)

        if task.kind == "upload":
            return self._upload(manager, task)
        if task.kind == "download":
            return self._download(manager, task)
        return self._download_large(manager, task)

    def _upload(self, manager: TransferManager, task: TransferTask) -> bool:
        file_paths = self.file_scanner.expand_sources(task.sources, task.recursive)
        if not file_paths:
            self.logger.warning(f"No files found in {', '.join(task.sources)}")
            return True

        results = manager.upload_many(
            file_paths,
            UploadManyOptions(
                concurrency_limit=self.config.options.concurrency_limit,
                timeout_seconds=self.config.options.timeout_seconds,
                skip_if_exists=task.skip_if_exists,
                prefix=task.prefix,
                return_exceptions=True,
            ),
        )
        return self._report(task, results)

    def _download(self, manager: TransferManager, task: TransferTask) -> bool:
        objects = [manager.bucket.file(key) for key in task.keys]
        # prefix も strip_prefix もなければカレントディレクトリにオブジェクト名で保存
        prefix = task.prefix if task.prefix or task.strip_prefix else os.curdir

        results = manager.download_many(
            objects,
            DownloadManyOptions(
                concurrency_limit=self.config.options.concurrency_limit,
                timeout_seconds=self.config.options.timeout_seconds,
                prefix=prefix,
                strip_prefix=task.strip_prefix,
                return_exceptions=True,
            ),
        )
        return self._report(task, results)

    def _download_large(self, manager: TransferManager, task: TransferTask) -> bool:
        key = task.keys[0]
        destination = None
        if task.prefix:
            destination = os.path.join(task.prefix, os.path.basename(key))
            os.makedirs(task.prefix, exist_ok=True)

        content = manager.download_large_file(
            manager.bucket.file(key),
            LargeFileDownloadOptions(
                concurrency_limit=self.config.options.concurrency_limit,
                timeout_seconds=self.config.options.timeout_seconds,
                chunk_size_bytes=self.config.options.chunk_size_bytes,
                destination=destination,
            ),
        )
        self.logger.info(f"Downloaded {key}: {len(content)} bytes")
        return True

    def _report(self, task: TransferTask, results: List) -> bool:
        failed = sum(1 for result in results if isinstance(result, Exception))
        successful = len(results) - failed
        self.logger.info(
            f"Task '{task.name}' transferred {successful} items, {failed} failed"
        )
        return failed == 0
