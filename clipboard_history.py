import argparse
import logging
import sys

from clipboard_backends import BACKENDS, create_backend
from clipboard_worker import ClipboardWorker
from history_config import LOG_FORMAT, POLL_INTERVAL
from history_errors import ClipboardError
from history_manager import HistoryManager
from history_storage import HistoryStore

logger = logging.getLogger("clipboard_history")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="记录剪贴板历史")
    parser.add_argument("--history-file", help="历史记录文件路径（默认在用户数据目录）")
    parser.add_argument("--interval", type=float, default=POLL_INTERVAL, help="轮询间隔（秒）")
    parser.add_argument("--backend", choices=sorted(BACKENDS), help="剪贴板后端")
    parser.add_argument("--clear", action="store_true", help="启动时清空历史")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    return parser.parse_args(argv)


def log_head(entries):
    if entries:
        logger.info("最新: %s", entries[0].content.preview())


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        backend = create_backend(args.backend)
    except ClipboardError as e:
        logger.error("%s", e)
        return 1

    # 初始化组件
    history_manager = HistoryManager(backend, HistoryStore(args.history_file))
    if history_manager.load_error is not None:
        logger.warning("历史文件无法读取，已从空历史开始: %s", history_manager.store.path)
    if args.clear:
        history_manager.clear()
    logger.info("已加载 %d 条历史: %s", len(history_manager), history_manager.store.path)
    history_manager.subscribe(log_head)

    # 启动剪贴板监听线程
    worker = ClipboardWorker(history_manager, args.interval)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(timeout=0.5)
    except KeyboardInterrupt:
        logger.info("退出中...")
    finally:
        worker.stop()
        worker.join(timeout=args.interval + 1)
    return 0


if __name__ == "__main__":
    sys.exit(main())
