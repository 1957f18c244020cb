"""並列数を制限したタスク実行"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, List, Optional, Sequence

from ..exceptions import TransferCancelledError, TransferTimeoutError
from ..utils.logger import LoggerManager


class ParallelExecutor:
    """最大 max_workers 個までタスクを同時実行する

    タスクは投入順（FIFO）に開始され、結果は完了順ではなく投入順に返す。
    失敗があっても他のタスクは中断せず、全タスクの終了を待ってから
    最初に失敗した例外を送出する。
    """

    def __init__(
        self,
        max_workers: int = 2,
        cancel_event: Optional[threading.Event] = None,
        timeout_seconds: Optional[float] = None,
        name: str = "transfer",
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.cancel_event = cancel_event
        self.timeout_seconds = timeout_seconds
        self.name = name
        self.logger = LoggerManager.get_logger()

    def run(
        self,
        tasks: Sequence[Callable[[], Any]],
        return_exceptions: bool = False,
    ) -> List[Any]:
        """タスクを実行して投入順の結果リストを返す

        Args:
            tasks: 引数なしで呼び出せるタスクのリスト
            return_exceptions: True なら失敗したタスクの位置に例外を入れて返す

        Returns:
            各タスクの戻り値（または例外）のリスト
        """
        total = len(tasks)
        results: List[Any] = [None] * total
        if total == 0:
            return results

        deadline = None
        if self.timeout_seconds is not None:
            deadline = time.monotonic() + self.timeout_seconds

        self.logger.debug(
            f"Running {total} {self.name} tasks with {self.max_workers} workers"
        )

        first_error: Optional[BaseException] = None
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix=self.name
        ) as pool:
            future_to_index = {
                pool.submit(self._admit, index, task, deadline): index
                for index, task in enumerate(tasks)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    results[index] = e
                    if first_error is None:
                        first_error = e
                    self.logger.error(f"{self.name} task {index + 1}/{total} failed: {e}")

        if first_error is not None and not return_exceptions:
            raise first_error
        return results

    def _admit(self, index: int, task: Callable[[], Any], deadline: Optional[float]) -> Any:
        """ワーカーが空いた時点で呼ばれ、キャンセルと期限を確認してから実行"""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise TransferCancelledError(f"{self.name} task {index + 1} cancelled before start")
        if deadline is not None and time.monotonic() >= deadline:
            raise TransferTimeoutError(
                f"{self.name} task {index + 1} not started within {self.timeout_seconds}s"
            )

        self.logger.debug(f"{self.name} task {index + 1} started")
        result = task()
        self.logger.debug(f"{self.name} task {index + 1} finished")
        return result
