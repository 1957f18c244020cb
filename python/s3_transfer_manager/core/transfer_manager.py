"""バケットに対する並列転送"""
import copy
import os
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..models.options import (
    LARGE_FILE_SIZE_THRESHOLD,
    DownloadManyOptions,
    LargeFileDownloadOptions,
    UploadManyOptions,
)
from ..utils.file_utils import RandomAccessFile
from ..utils.logger import LoggerManager
from .bucket import Bucket, StorageObject
from .executor import ParallelExecutor


ChunkRange = Tuple[int, int]


def merge_skip_if_exists(passthrough_options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """if_generation_match = 0 を前提条件にマージしたコピーを返す

    既存の前提条件は残し、呼び出し元の辞書は変更しない。
    """
    merged = copy.deepcopy(passthrough_options) if passthrough_options else {}
    precondition_opts = dict(merged.get("precondition_opts") or {})
    precondition_opts["if_generation_match"] = 0
    merged["precondition_opts"] = precondition_opts
    return merged


def strip_name_prefix(name: str, strip_prefix: str) -> str:
    """先頭が strip_prefix と一致する場合だけ取り除く（パス区切りは考慮しない）"""
    if strip_prefix and name.startswith(strip_prefix):
        return name[len(strip_prefix):]
    return name


def plan_chunks(size: int, chunk_size: int, concurrency_limit: int) -> Tuple[List[ChunkRange], int]:
    """分割ダウンロードのバイト範囲と実際の並列数を決める

    しきい値未満のオブジェクトは1チャンク・並列数1で取得する。
    範囲は両端を含み、最後のチャンクの終端は size - 1 に切り詰める。

    Returns:
        ((開始, 終了) のリスト, 並列数) のタプル
    """
    if size < LARGE_FILE_SIZE_THRESHOLD:
        chunk_size = max(size, 1)
        concurrency_limit = 1

    ranges: List[ChunkRange] = []
    start = 0
    while start < size:
        end = min(start + chunk_size - 1, size - 1)
        ranges.append((start, end))
        start += chunk_size
    return ranges, concurrency_limit


class TransferManager:
    """バケットに対する複数ファイル・大容量ファイルの並列転送

    各メソッドは callback を省略すると結果を返し（失敗時は最初の例外を送出）、
    callback を渡すと結果を callback(error, ...) で通知して None を返す。
    """

    def __init__(self, bucket: Bucket):
        self.bucket = bucket
        self.logger = LoggerManager.get_logger()

    def upload_many(
        self,
        file_paths: Sequence[str],
        options: Optional[UploadManyOptions] = None,
        callback: Optional[Callable[..., None]] = None,
    ) -> Optional[List[Tuple[StorageObject, Dict[str, Any]]]]:
        """複数ファイルを並列でアップロード

        Args:
            file_paths: アップロードするローカルファイルのパス
            options: UploadManyOptions
            callback: callback(error, files, metadata) 形式のコールバック

        Returns:
            入力順の (オブジェクト, メタデータ) のリスト
        """
        options = options or UploadManyOptions()

        passthrough_options = options.passthrough_options
        if options.skip_if_exists:
            passthrough_options = merge_skip_if_exists(passthrough_options)

        tasks = []
        for file_path in file_paths:
            # 各タスクは独立したコピーを持つ
            item_options = copy.deepcopy(passthrough_options) if passthrough_options else {}
            if options.prefix:
                item_options["destination"] = os.path.join(
                    options.prefix, os.path.basename(file_path)
                )
            tasks.append(self._upload_task(file_path, item_options))

        self.logger.info(
            f"Uploading {len(tasks)} files to {self.bucket.name} "
            f"with concurrency {options.concurrency_limit}"
        )

        try:
            results = self._executor(options, "upload").run(
                tasks, return_exceptions=options.return_exceptions
            )
        except Exception as e:
            if callback is None:
                raise
            callback(e)
            return None

        if callback is None:
            return results

        files = [self._pick(result, 0) for result in results]
        metadata = [self._pick(result, 1) for result in results]
        callback(None, files, metadata)
        return None

    def download_many(
        self,
        objects: Sequence[StorageObject],
        options: Optional[DownloadManyOptions] = None,
        callback: Optional[Callable[..., None]] = None,
    ) -> Optional[List[bytes]]:
        """複数オブジェクトを並列でダウンロード

        prefix を指定するとローカルの保存先は prefix / destination / オブジェクト名、
        strip_prefix を指定するとオブジェクト名の先頭から strip_prefix を除いた名前になる。
        両方指定した場合は strip_prefix が優先される。

        Returns:
            入力順のオブジェクト内容のリスト
        """
        options = options or DownloadManyOptions()

        tasks = []
        for obj in objects:
            item_options = (
                copy.deepcopy(options.passthrough_options) if options.passthrough_options else {}
            )
            if options.prefix:
                item_options["destination"] = os.path.join(
                    options.prefix, item_options.get("destination") or "", obj.name
                )
            if options.strip_prefix:
                item_options["destination"] = strip_name_prefix(obj.name, options.strip_prefix)
            tasks.append(self._download_task(obj, item_options))

        self.logger.info(
            f"Downloading {len(tasks)} objects from {self.bucket.name} "
            f"with concurrency {options.concurrency_limit}"
        )

        try:
            results = self._executor(options, "download").run(
                tasks, return_exceptions=options.return_exceptions
            )
        except Exception as e:
            if callback is None:
                raise
            callback(e)
            return None

        if callback is None:
            return results
        callback(None, *results)
        return None

    def download_large_file(
        self,
        obj: StorageObject,
        options: Optional[LargeFileDownloadOptions] = None,
        callback: Optional[Callable[..., None]] = None,
    ) -> Optional[bytes]:
        """大きいオブジェクトをバイト範囲に分割して並列ダウンロード

        各チャンクはローカルファイルの対応するオフセットへ直接書き込む。
        ファイルはどの終了経路でも一度だけ閉じる。失敗時に書き込み済みの
        部分は削除しない。

        Returns:
            チャンク順に連結したオブジェクト全体の内容
        """
        options = options or LargeFileDownloadOptions()

        try:
            content = self._download_chunks(obj, options)
        except Exception as e:
            if callback is None:
                raise
            callback(e, b"")
            return None

        if callback is None:
            return content
        callback(None, content)
        return None

    def _download_chunks(self, obj: StorageObject, options: LargeFileDownloadOptions) -> bytes:
        size = int(obj.get_metadata()["size"])
        ranges, concurrency_limit = plan_chunks(
            size, options.chunk_size_bytes, options.concurrency_limit
        )
        destination = options.destination or os.path.basename(obj.name)
        if not destination:
            raise ValueError(
                f"Cannot derive a local file name from object {obj.name!r}; "
                "set destination explicitly"
            )

        self.logger.info(
            f"Downloading {obj.name} ({size} bytes) to {destination} "
            f"in {len(ranges)} chunks with concurrency {concurrency_limit}"
        )

        with RandomAccessFile(destination) as output:
            tasks = [self._chunk_task(obj, output, start, end) for start, end in ranges]
            executor = ParallelExecutor(
                max_workers=concurrency_limit,
                cancel_event=options.cancel_event,
                timeout_seconds=options.timeout_seconds,
                name="chunk",
            )
            chunks = executor.run(tasks)

        return b"".join(chunks)

    def _executor(self, options, name: str) -> ParallelExecutor:
        return ParallelExecutor(
            max_workers=options.concurrency_limit,
            cancel_event=options.cancel_event,
            timeout_seconds=options.timeout_seconds,
            name=name,
        )

    def _upload_task(self, file_path: str, item_options: Dict[str, Any]):
        return lambda: self.bucket.upload(file_path, **item_options)

    @staticmethod
    def _download_task(obj: StorageObject, item_options: Dict[str, Any]):
        return lambda: obj.download(**item_options)

    @staticmethod
    def _chunk_task(obj: StorageObject, output: RandomAccessFile, start: int, end: int):
        def task() -> bytes:
            data = obj.download(start=start, end=end)
            output.write_at(data, start)
            return data
        return task

    @staticmethod
    def _pick(result, index: int):
        # return_exceptions 時は失敗した位置に例外がそのまま入る
        if isinstance(result, BaseException):
            return result
        return result[index]
