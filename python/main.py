#!/usr/bin/env python3
"""S3 Transfer Manager - エントリーポイント"""
import sys

from s3_transfer_manager import S3TransferApp


def main():
    """メイン関数"""
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    try:
        app = S3TransferApp(config_path)
        successful, failed = app.run()

        exit_code = 0 if failed == 0 else 1
        sys.exit(exit_code)

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
