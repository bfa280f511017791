import logging
import threading

from history_config import POLL_INTERVAL
from history_errors import ClipboardError
from history_models import read_payload

logger = logging.getLogger(__name__)


class ClipboardWorker(threading.Thread):
    """后台轮询剪贴板的变更计数，发现外部复制时交给 HistoryManager 记录

    启动前剪贴板里已有的内容不会被记录。
    """

    def __init__(self, history_manager, poll_interval=POLL_INTERVAL, backend=None, daemon=True):
        super().__init__(daemon=daemon)
        self.history_manager = history_manager
        self.backend = backend or history_manager.backend
        self.poll_interval = poll_interval
        self.running = True
        self._stop_event = threading.Event()
        try:
            self.last_count = self.backend.current_mutation_count()
        except ClipboardError as e:
            logger.error("读取剪贴板计数失败: %s", e)
            self.last_count = None

    def tick(self):
        """检测一次；记录了新条目时返回该条目"""
        with self.history_manager.lock:
            count = self.backend.current_mutation_count()
            if self.last_count is None:
                self.last_count = count
                return None
            if count == self.last_count:
                return None
            self.last_count = count

            # 自己写回的内容，不管现在是什么都不记录
            if self.history_manager.consume_ignore_flag():
                logger.debug("跳过程序自身写入的变化 (count=%s)", count)
                return None

            payload = read_payload(self.backend)
            if payload is None:
                logger.debug("剪贴板已变化但没有可记录的内容")
                return None
            return self.history_manager.capture(payload)

    def run(self):
        """后台轮询剪贴板"""
        while self.running:
            try:
                self.tick()
            except Exception:
                logger.exception("剪贴板检测失败")
            self._stop_event.wait(self.poll_interval)

    def stop(self):
        """停止工作线程"""
        self.running = False
        self._stop_event.set()
