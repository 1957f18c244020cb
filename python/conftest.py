"""pytest 共通フィクスチャ"""
import boto3
import pytest
from moto import mock_aws

from s3_transfer_manager.utils.logger import LoggerManager


@pytest.fixture(autouse=True)
def reset_logger():
    """テストごとにロガーの状態を初期化"""
    LoggerManager.reset()
    yield
    LoggerManager.reset()


@pytest.fixture
def aws_credentials(monkeypatch):
    """moto 用のダミー認証情報"""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def s3_bucket(aws_credentials):
    """moto のバケットを作成して (client, bucket_name) を返す"""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-bucket")
        yield client, "test-bucket"
