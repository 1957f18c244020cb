"""S3 バケットとオブジェクトのハンドル"""
import os
from typing import Any, Dict, Optional, Tuple

from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import ClientError

from ..exceptions import ObjectNotFoundError, PreconditionFailedError, StorageError
from ..utils.logger import LoggerManager


PRECONDITION_FAILED_CODES = ("PreconditionFailed", "412")
NOT_FOUND_CODES = ("NoSuchKey", "NotFound", "404")
MAX_PUT_OBJECT_SIZE = 5 * 1024 * 1024 * 1024  # 5GB


def translate_client_error(error: ClientError, key: str) -> StorageError:
    """botocore の ClientError をパッケージの例外に変換"""
    code = error.response.get("Error", {}).get("Code", "")
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

    if code in PRECONDITION_FAILED_CODES or status == 412:
        return PreconditionFailedError(f"Precondition failed for {key}: {error}", key=key)
    if code in NOT_FOUND_CODES or status == 404:
        return ObjectNotFoundError(f"Object not found: {key}", key=key)
    return StorageError(f"S3 error for {key}: {error}", key=key)


def precondition_args(precondition_opts: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """前提条件を S3 の条件付き書き込みヘッダーに変換

    S3 には世代番号がないため if_generation_match は 0（未作成）だけを扱う。
    """
    if not precondition_opts:
        return {}

    args: Dict[str, str] = {}
    for name, value in precondition_opts.items():
        if name == "if_generation_match":
            if value != 0:
                raise ValueError(
                    f"Unsupported if_generation_match: {value}. Only 0 is supported on S3"
                )
            args["IfNoneMatch"] = "*"
        elif name == "if_etag_match":
            args["IfMatch"] = value
        else:
            raise ValueError(f"Unsupported precondition: {name}")
    return args


class StorageObject:
    """バケット内のオブジェクト"""

    def __init__(self, bucket: 'Bucket', name: str):
        self.bucket = bucket
        self.name = name

    def __repr__(self) -> str:
        return f"StorageObject(bucket={self.bucket.name!r}, name={self.name!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, StorageObject):
            return NotImplemented
        return self.bucket.name == other.bucket.name and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.bucket.name, self.name))

    def get_metadata(self) -> Dict[str, Any]:
        """オブジェクトのメタデータを取得（HEAD）"""
        client = self.bucket.client
        try:
            response = client.head_object(Bucket=self.bucket.name, Key=self.name)
        except ClientError as e:
            error = translate_client_error(e, self.name)
            self.bucket.logger.error(f"Error getting metadata: {error}")
            raise error from e

        last_modified = response.get("LastModified")
        return {
            "name": self.name,
            "bucket": self.bucket.name,
            "size": int(response["ContentLength"]),
            "etag": response.get("ETag", "").strip('"'),
            "generation": response.get("VersionId"),
            "content_type": response.get("ContentType"),
            "updated": last_modified.isoformat() if last_modified else None,
            "metadata": response.get("Metadata", {}),
        }

    def download(
        self,
        destination: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> bytes:
        """オブジェクトの内容を取得

        Args:
            destination: 指定した場合はローカルファイルにも書き込む
            start: 範囲の開始バイト（含む）
            end: 範囲の終了バイト（含む）

        Returns:
            取得したバイト列
        """
        params: Dict[str, Any] = {"Bucket": self.bucket.name, "Key": self.name}
        if start is not None or end is not None:
            range_start = start if start is not None else 0
            range_end = end if end is not None else ""
            params["Range"] = f"bytes={range_start}-{range_end}"

        try:
            response = self.bucket.client.get_object(**params)
            content = response["Body"].read()
        except ClientError as e:
            error = translate_client_error(e, self.name)
            self.bucket.logger.error(f"Error downloading: {error}")
            raise error from e

        if destination:
            dest_dir = os.path.dirname(destination)
            if dest_dir and not os.path.exists(dest_dir):
                os.makedirs(dest_dir, exist_ok=True)
            with open(destination, "wb") as file:
                file.write(content)
            self.bucket.logger.info(
                f"Downloaded s3://{self.bucket.name}/{self.name} to {destination}"
            )

        return content


class Bucket:
    """S3 バケットのハンドル"""

    def __init__(self, client, name: str, transfer_config: Optional[TransferConfig] = None):
        self.client = client
        self.name = name
        self.transfer_config = transfer_config
        self.logger = LoggerManager.get_logger()

    def file(self, name: str) -> StorageObject:
        """オブジェクトハンドルを作成（リクエストは発行しない）"""
        return StorageObject(self, name)

    def upload(
        self,
        local_path: str,
        destination: Optional[str] = None,
        precondition_opts: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None,
    ) -> Tuple[StorageObject, Dict[str, Any]]:
        """ローカルファイルをアップロード

        前提条件がある場合は条件付き PutObject、ない場合は
        TransferConfig を使った upload_file（マルチパート対応）を使う。
        条件付き PutObject は1リクエストなので 5GiB を超えるファイルは
        S3 側で拒否される。

        Returns:
            (アップロードしたオブジェクト, メタデータ) のタプル
        """
        key = destination or os.path.basename(local_path)
        conditions = precondition_args(precondition_opts)

        if conditions and os.path.getsize(local_path) > MAX_PUT_OBJECT_SIZE:
            self.logger.warning(
                f"{local_path} exceeds the 5 GiB single PutObject limit; "
                "conditional upload is likely to be rejected"
            )

        extra_args: Dict[str, Any] = {}
        if metadata:
            extra_args["Metadata"] = metadata
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            if conditions:
                with open(local_path, "rb") as body:
                    self.client.put_object(
                        Bucket=self.name, Key=key, Body=body, **extra_args, **conditions
                    )
            else:
                kwargs: Dict[str, Any] = {}
                if extra_args:
                    kwargs["ExtraArgs"] = extra_args
                if self.transfer_config is not None:
                    kwargs["Config"] = self.transfer_config
                self.client.upload_file(local_path, self.name, key, **kwargs)
        except ClientError as e:
            error = translate_client_error(e, key)
            self.logger.error(f"Error uploading {local_path}: {error}")
            raise error from e
        except S3UploadFailedError as e:
            self.logger.error(f"Error uploading {local_path}: {e}")
            raise StorageError(f"Upload failed for {key}: {e}", key=key) from e

        self.logger.info(f"Successfully uploaded {local_path} to {self.name}/{key}")
        uploaded = self.file(key)
        return uploaded, uploaded.get_metadata()
