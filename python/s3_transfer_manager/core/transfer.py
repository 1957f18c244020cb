"""S3転送設定管理"""
from boto3.s3.transfer import TransferConfig as BotoTransferConfig
from ..models.config import TransferOptions


class TransferConfigManager:
    """boto3 TransferConfig の管理"""

    @staticmethod
    def create_config(options: TransferOptions) -> BotoTransferConfig:
        """TransferOptionsから単一ファイル転送用のTransferConfigを作成

        ファイル単位の並列数は TransferManager 側で制御するので、
        ここで設定するのは1ファイル内のマルチパート転送の並列数。
        """
        return BotoTransferConfig(
            multipart_threshold=options.multipart_threshold,
            max_concurrency=options.max_concurrency,
            multipart_chunksize=options.multipart_chunksize,
            use_threads=options.use_threads,
            max_io_queue=options.max_io_queue,
            io_chunksize=options.io_chunksize,
        )
