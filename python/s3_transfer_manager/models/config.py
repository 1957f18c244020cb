"""設定管理用のデータクラス"""
from dataclasses import dataclass, field
from typing import List, Optional
import json
import os
import re

from .options import (
    DEFAULT_CONCURRENCY_LIMIT,
    LARGE_FILE_DEFAULT_CHUNK_SIZE,
)


TASK_KINDS = ("upload", "download", "download_large")


@dataclass
class LoggingConfig:
    """ロギング設定"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class AssumeRoleConfig:
    """AssumeRole設定"""
    role_arn: str
    session_name: str
    external_id: Optional[str] = None
    duration_seconds: int = 3600

    def __post_init__(self):
        """AssumeRole設定のバリデーション"""
        arn_pattern = r'^arn:aws:iam::[0-9]{12}:role\/[a-zA-Z0-9+=,.@_-]+$'
        if not re.match(arn_pattern, self.role_arn):
            raise ValueError(
                f"Invalid role_arn format: {self.role_arn}. "
                "Expected format: arn:aws:iam::ACCOUNT_ID:role/ROLE_NAME"
            )

        if not self.session_name or not self.session_name.strip():
            raise ValueError("session_name cannot be empty")

        # 2-64文字の英数字、アンダースコア、ハイフン、ピリオドのみ
        session_name_pattern = r'^[a-zA-Z0-9_.-]{2,64}$'
        if not re.match(session_name_pattern, self.session_name):
            raise ValueError(
                f"Invalid session_name: {self.session_name}. "
                "Must be 2-64 characters long and contain only alphanumeric characters, "
                "underscores, hyphens, and periods"
            )

        if not (900 <= self.duration_seconds <= 43200):
            raise ValueError(
                f"Invalid duration_seconds: {self.duration_seconds}. "
                "Must be between 900 and 43200 seconds (15 minutes to 12 hours)"
            )


@dataclass
class AWSConfig:
    """AWS関連の設定"""
    region: str
    profile: Optional[str] = None
    assume_role: Optional[AssumeRoleConfig] = None
    endpoint_url: Optional[str] = None  # S3互換ストレージ用

    def __post_init__(self):
        if self.assume_role:
            if isinstance(self.assume_role, dict):
                self.assume_role = AssumeRoleConfig(**self.assume_role)
            elif not isinstance(self.assume_role, AssumeRoleConfig):
                raise TypeError(
                    f"assume_role must be dict or AssumeRoleConfig, got {type(self.assume_role)}"
                )


@dataclass
class TransferOptions:
    """転送オプション（boto3 TransferConfig とデフォルト並列数）"""
    multipart_threshold: int = 100 * 1024 * 1024  # 100MB
    max_concurrency: int = 4
    multipart_chunksize: int = 10 * 1024 * 1024  # 10MB
    use_threads: bool = True
    max_io_queue: int = 100
    io_chunksize: int = 262144  # 256KB
    exclude_patterns: List[str] = field(default_factory=list)
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    chunk_size_bytes: int = LARGE_FILE_DEFAULT_CHUNK_SIZE
    timeout_seconds: Optional[float] = None


@dataclass
class TransferTask:
    """個別の転送タスク"""
    name: str
    kind: str
    bucket: str

    description: Optional[str] = None
    enabled: bool = True
    sources: List[str] = field(default_factory=list)  # upload: ファイルまたはディレクトリ
    keys: List[str] = field(default_factory=list)  # download / download_large
    prefix: Optional[str] = None
    strip_prefix: Optional[str] = None
    skip_if_exists: bool = False
    recursive: bool = False

    def __post_init__(self):
        if self.kind not in TASK_KINDS:
            raise ValueError(
                f"Invalid kind for task '{self.name}': {self.kind}. "
                f"Expected one of {', '.join(TASK_KINDS)}"
            )
        if self.kind == "upload" and not self.sources:
            raise ValueError(f"sources is required for upload task: {self.name}")
        if self.kind != "upload" and not self.keys:
            raise ValueError(f"keys is required for {self.kind} task: {self.name}")
        if self.kind == "download_large" and len(self.keys) != 1:
            raise ValueError(f"download_large task takes exactly one key: {self.name}")


@dataclass
class Config:
    """メイン設定クラス"""
    logging: LoggingConfig
    aws: AWSConfig
    options: TransferOptions
    transfer_tasks: List[TransferTask]

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """設定ファイルから読み込み"""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file {config_path} not found.")

        try:
            with open(config_path, "r", encoding="utf-8") as file:
                data = json.load(file)

            logging_config = LoggingConfig(**data.get("logging", {}))
            aws_config = AWSConfig(**data.get("aws", {}))
            options = TransferOptions(**data.get("options", {}))

            transfer_tasks = [
                TransferTask(**task) for task in data.get("transfer_tasks", [])
            ]

            return cls(
                logging=logging_config,
                aws=aws_config,
                options=options,
                transfer_tasks=transfer_tasks
            )

        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {config_path}: {e}")
        except Exception as e:
            raise RuntimeError(f"Error loading configuration: {e}")
