"""転送操作ごとのオプション"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import threading


DEFAULT_CONCURRENCY_LIMIT = 2
LARGE_FILE_SIZE_THRESHOLD = 256 * 1024 * 1024  # 256MB
LARGE_FILE_DEFAULT_CHUNK_SIZE = 10 * 1024 * 1024  # 10MB


@dataclass
class _ParallelOptions:
    """並列実行の共通オプション"""
    concurrency_limit: Optional[int] = None
    # キャンセルトークンと期限はキュー内の各タスク開始時に確認される
    cancel_event: Optional[threading.Event] = None
    timeout_seconds: Optional[float] = None

    def __post_init__(self):
        if self.concurrency_limit is None:
            self.concurrency_limit = DEFAULT_CONCURRENCY_LIMIT
        elif self.concurrency_limit < 1:
            raise ValueError(
                f"Invalid concurrency_limit: {self.concurrency_limit}. Must be at least 1"
            )
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. Must be positive"
            )


@dataclass
class UploadManyOptions(_ParallelOptions):
    """複数ファイルアップロードのオプション

    Attributes:
        skip_if_exists: 既存オブジェクトを上書きしない（ifGenerationMatch = 0）
        prefix: アップロード先オブジェクト名に付けるプレフィックス
        passthrough_options: 個々の Bucket.upload にそのまま渡すオプション
        return_exceptions: True なら失敗した位置に例外を入れて部分結果を返す
    """
    skip_if_exists: bool = False
    prefix: Optional[str] = None
    passthrough_options: Optional[Dict[str, Any]] = None
    return_exceptions: bool = False


@dataclass
class DownloadManyOptions(_ParallelOptions):
    """複数オブジェクトダウンロードのオプション"""
    prefix: Optional[str] = None
    strip_prefix: Optional[str] = None
    passthrough_options: Optional[Dict[str, Any]] = None
    return_exceptions: bool = False


@dataclass
class LargeFileDownloadOptions(_ParallelOptions):
    """大きいファイルの分割ダウンロードのオプション"""
    chunk_size_bytes: Optional[int] = None
    destination: Optional[str] = None  # 省略時はオブジェクト名のベース名

    def __post_init__(self):
        super().__post_init__()
        if self.chunk_size_bytes is None:
            self.chunk_size_bytes = LARGE_FILE_DEFAULT_CHUNK_SIZE
        elif self.chunk_size_bytes < 1:
            raise ValueError(
                f"Invalid chunk_size_bytes: {self.chunk_size_bytes}. Must be at least 1"
            )
