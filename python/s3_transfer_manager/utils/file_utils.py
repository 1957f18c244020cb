"""ファイル操作関連のユーティリティ"""
import os
import fnmatch
from typing import List, Generator, Optional
from dataclasses import dataclass


@dataclass
class FileInfo:
    """ファイル情報"""
    path: str
    size: int
    relative_path: str

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


class FileScanner:
    """アップロード元ファイルの列挙"""

    def __init__(self, exclude_patterns: Optional[List[str]] = None):
        self.exclude_patterns = exclude_patterns or []

    def should_exclude(self, file_path: str) -> bool:
        """ファイルが除外パターンに一致するかチェック"""
        file_name = os.path.basename(file_path)

        for pattern in self.exclude_patterns:
            if fnmatch.fnmatch(file_name, pattern):
                return True
            if fnmatch.fnmatch(file_path, f"*{pattern}*"):
                return True

        return False

    def scan_directory(self, directory: str, recursive: bool = False) -> Generator[FileInfo, None, None]:
        """ディレクトリをスキャンしてファイル情報を生成（名前順）"""
        if not os.path.isdir(directory):
            raise ValueError(f"Not a directory: {directory}")

        if recursive:
            for root, dirs, files in os.walk(directory):
                dirs[:] = sorted(d for d in dirs if not self.should_exclude(os.path.join(root, d)))

                for file in sorted(files):
                    file_path = os.path.join(root, file)
                    if not self.should_exclude(file_path):
                        yield FileInfo(
                            path=file_path,
                            size=os.path.getsize(file_path),
                            relative_path=os.path.relpath(file_path, directory)
                        )
        else:
            for item in sorted(os.listdir(directory)):
                file_path = os.path.join(directory, item)
                if os.path.isfile(file_path) and not self.should_exclude(file_path):
                    yield FileInfo(
                        path=file_path,
                        size=os.path.getsize(file_path),
                        relative_path=item
                    )

    def expand_sources(self, sources: List[str], recursive: bool = False) -> List[str]:
        """ファイルとディレクトリの混在リストをファイルパスのリストに展開"""
        paths: List[str] = []
        for source in sources:
            if os.path.isfile(source):
                paths.append(source)
            elif os.path.isdir(source):
                paths.extend(info.path for info in self.scan_directory(source, recursive))
            else:
                raise ValueError(f"Source is neither file nor directory: {source}")
        return paths


class RandomAccessFile:
    """オフセット指定で書き込むローカルファイル

    os.pwrite はファイル位置を共有しないので、複数スレッドから
    異なるオフセットへ同時に書き込んでもロックは不要。
    close() は何度呼んでも一度だけ実行される。
    """

    def __init__(self, path: str):
        self.path = path
        self._file = open(path, "w+b")
        self._closed = False

    def write_at(self, data: bytes, offset: int) -> int:
        """offset の位置に data を書き込み、書き込んだバイト数を返す"""
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self.path}")
        fd = self._file.fileno()
        written = 0
        view = memoryview(data)
        # pwrite は部分書き込みがあり得る
        while written < len(view):
            written += os.pwrite(fd, view[written:], offset + written)
        return written

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._file.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'RandomAccessFile':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
