#!/usr/bin/env python3
"""設定クラスのテスト"""
import json
import threading

import pytest

from s3_transfer_manager.models.config import (
    AWSConfig,
    AssumeRoleConfig,
    Config,
    TransferTask,
)
from s3_transfer_manager.models.options import (
    DEFAULT_CONCURRENCY_LIMIT,
    LARGE_FILE_DEFAULT_CHUNK_SIZE,
    DownloadManyOptions,
    LargeFileDownloadOptions,
    UploadManyOptions,
)


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_config_loading(tmp_path):
    """config.json が読み込めるか確認"""
    path = write_config(tmp_path, {
        "logging": {"level": "DEBUG"},
        "aws": {"region": "ap-northeast-1", "endpoint_url": "http://localhost:9000"},
        "options": {"concurrency_limit": 4, "chunk_size_bytes": 1024},
        "transfer_tasks": [
            {"name": "backup", "kind": "upload", "bucket": "b", "sources": ["data"]},
            {"name": "restore", "kind": "download", "bucket": "b", "keys": ["x/a.txt"],
             "strip_prefix": "x/"},
        ],
    })

    config = Config.from_file(path)

    assert config.logging.level == "DEBUG"
    assert config.aws.region == "ap-northeast-1"
    assert config.aws.endpoint_url == "http://localhost:9000"
    assert config.options.concurrency_limit == 4
    assert config.options.max_concurrency == 4
    assert [task.name for task in config.transfer_tasks] == ["backup", "restore"]
    assert config.transfer_tasks[1].strip_prefix == "x/"


def test_config_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.from_file(str(tmp_path / "missing.json"))


def test_config_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Error decoding JSON"):
        Config.from_file(str(path))


def test_config_invalid_task(tmp_path):
    path = write_config(tmp_path, {
        "aws": {"region": "us-east-1"},
        "transfer_tasks": [{"name": "bad", "kind": "sync", "bucket": "b"}],
    })

    with pytest.raises(RuntimeError, match="Invalid kind"):
        Config.from_file(path)


def test_transfer_task_validation():
    with pytest.raises(ValueError, match="sources is required"):
        TransferTask(name="t", kind="upload", bucket="b")
    with pytest.raises(ValueError, match="keys is required"):
        TransferTask(name="t", kind="download", bucket="b")
    with pytest.raises(ValueError, match="exactly one key"):
        TransferTask(name="t", kind="download_large", bucket="b", keys=["a", "b"])


def test_assume_role_from_dict():
    config = AWSConfig(
        region="us-east-1",
        assume_role={"role_arn": "arn:aws:iam::123456789012:role/Transfer", "session_name": "tm"},
    )

    assert isinstance(config.assume_role, AssumeRoleConfig)
    assert config.assume_role.duration_seconds == 3600


def test_assume_role_validation():
    with pytest.raises(ValueError, match="Invalid role_arn"):
        AssumeRoleConfig(role_arn="not-an-arn", session_name="tm")
    with pytest.raises(ValueError, match="Invalid duration_seconds"):
        AssumeRoleConfig(
            role_arn="arn:aws:iam::123456789012:role/Transfer",
            session_name="tm",
            duration_seconds=60,
        )


def test_option_defaults():
    upload = UploadManyOptions()
    large = LargeFileDownloadOptions()

    assert upload.concurrency_limit == DEFAULT_CONCURRENCY_LIMIT
    assert upload.skip_if_exists is False
    assert large.chunk_size_bytes == LARGE_FILE_DEFAULT_CHUNK_SIZE
    assert DownloadManyOptions(cancel_event=threading.Event()).concurrency_limit == 2


@pytest.mark.parametrize("kwargs", [
    {"concurrency_limit": 0},
    {"timeout_seconds": 0},
    {"chunk_size_bytes": 0},
])
def test_option_validation(kwargs):
    with pytest.raises(ValueError):
        LargeFileDownloadOptions(**kwargs)
