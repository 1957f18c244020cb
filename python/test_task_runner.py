#!/usr/bin/env python3
"""TaskRunner のテスト（moto 使用）"""
import pytest

from s3_transfer_manager.core.s3_client import S3ClientManager
from s3_transfer_manager.core.task_runner import TaskRunner
from s3_transfer_manager.models.config import (
    AWSConfig,
    Config,
    LoggingConfig,
    TransferOptions,
    TransferTask,
)


def make_config(tasks, **options):
    return Config(
        logging=LoggingConfig(),
        aws=AWSConfig(region="us-east-1"),
        options=TransferOptions(**options),
        transfer_tasks=tasks,
    )


@pytest.fixture
def source_dir(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    for name in ("a.txt", "b.txt", "c.log"):
        (src / name).write_text(f"data of {name}")
    return src


def test_upload_then_download(s3_bucket, source_dir, tmp_path, monkeypatch):
    client, bucket_name = s3_bucket
    restore_dir = tmp_path / "restore"
    restore_dir.mkdir()
    monkeypatch.chdir(restore_dir)
    config = make_config(
        [
            TransferTask(name="backup", kind="upload", bucket=bucket_name,
                         sources=[str(source_dir)], prefix="backup"),
            TransferTask(name="disabled", kind="upload", bucket=bucket_name,
                         sources=["missing"], enabled=False),
            TransferTask(name="restore", kind="download", bucket=bucket_name,
                         keys=["backup/a.txt", "backup/b.txt"], strip_prefix="backup/"),
            TransferTask(name="large", kind="download_large", bucket=bucket_name,
                         keys=["backup/c.log"], prefix="large"),
        ],
        exclude_patterns=[],
        concurrency_limit=3,
    )

    runner = TaskRunner(config, S3ClientManager(config.aws))
    successful, failed = runner.run_all_tasks()

    assert (successful, failed) == (3, 0)
    keys = sorted(obj["Key"] for obj in client.list_objects_v2(Bucket=bucket_name)["Contents"])
    assert keys == ["backup/a.txt", "backup/b.txt", "backup/c.log"]
    assert (restore_dir / "a.txt").read_text() == "data of a.txt"
    assert (restore_dir / "b.txt").read_text() == "data of b.txt"
    assert (restore_dir / "large" / "c.log").read_text() == "data of c.log"


def test_download_without_prefix_uses_object_name(s3_bucket, tmp_path, monkeypatch):
    client, bucket_name = s3_bucket
    client.put_object(Bucket=bucket_name, Key="reports/q1.csv", Body=b"q1")
    monkeypatch.chdir(tmp_path)
    config = make_config([
        TransferTask(name="get", kind="download", bucket=bucket_name, keys=["reports/q1.csv"]),
    ])

    successful, failed = TaskRunner(config).run_all_tasks()

    assert (successful, failed) == (1, 0)
    assert (tmp_path / "reports" / "q1.csv").read_bytes() == b"q1"


def test_failed_items_fail_the_task(s3_bucket, tmp_path, monkeypatch):
    _, bucket_name = s3_bucket
    monkeypatch.chdir(tmp_path)
    config = make_config([
        TransferTask(name="missing", kind="download", bucket=bucket_name, keys=["nope.txt"]),
        TransferTask(name="missing-large", kind="download_large", bucket=bucket_name,
                     keys=["nope.bin"]),
    ])

    successful, failed = TaskRunner(config).run_all_tasks()

    assert (successful, failed) == (0, 2)
