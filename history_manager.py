import logging
import threading

from history_errors import EntryNotFoundError, StorageError
from history_models import HistoryEntry
from history_storage import HistoryStore

logger = logging.getLogger(__name__)


class HistoryManager:
    """维护内存中的剪贴板历史（最新的在前），负责持久化、通知和回写剪贴板

    所有修改都在 self.lock 内完成：修改历史、写文件、通知订阅者。
    轮询线程的每次检测也持有同一把锁，所以界面读到的永远是完整的历史。
    """

    def __init__(self, backend, store=None, load=True):
        self.backend = backend
        self.store = store or HistoryStore()
        self.history = []
        self.lock = threading.RLock()
        self.load_error = None
        self.save_error = None
        self._ignore_next_change = False
        self._observers = []
        if load:
            self.load()

    def load(self):
        """从文件加载历史，文件损坏时以空历史启动"""
        with self.lock:
            try:
                entries = self.store.load()
                self.load_error = None
            except StorageError as e:
                logger.error("加载历史失败，使用空历史: %s", e)
                self.load_error = e
                entries = []
            self.history = list(entries)
            self._notify()

    def save(self):
        """整体保存历史；失败时只记录，内存中的历史仍然有效"""
        with self.lock:
            try:
                self.store.save(self.history)
            except StorageError as e:
                logger.error("保存历史记录失败: %s", e)
                self.save_error = e
                return False
            self.save_error = None
            return True

    def capture(self, payload):
        """在最前面插入新条目；忽略标记有效时不记录，返回 None"""
        with self.lock:
            if self._ignore_next_change:
                logger.debug("忽略标记有效，不记录")
                return None
            entry = HistoryEntry(content=payload)
            self.history.insert(0, entry)
            logger.info("记录新的%s条目 %s", payload.kind, entry.id)
            self.save()
            self._notify()
            return entry

    def restore(self, entry_id):
        """把历史条目写回剪贴板，并忽略由此产生的下一次变化"""
        with self.lock:
            entry = self.get(entry_id)
            self._ignore_next_change = True
            try:
                entry.content.write_to(self.backend)
            except Exception:
                # 写入失败时撤销忽略标记
                self._ignore_next_change = False
                raise
            logger.debug("已写回剪贴板: %s", entry.id)
            return entry

    def clear(self):
        """清空历史记录"""
        with self.lock:
            self.history.clear()
            self.save()
            self._notify()

    def consume_ignore_flag(self):
        """检测到变化时调用：标记有效则清除并返回 True"""
        with self.lock:
            if self._ignore_next_change:
                self._ignore_next_change = False
                return True
            return False

    @property
    def ignore_next_change(self):
        return self._ignore_next_change

    def get(self, entry_id):
        with self.lock:
            for entry in self.history:
                if entry.id == entry_id:
                    return entry
        raise EntryNotFoundError(entry_id)

    @property
    def entries(self):
        """历史记录快照（元组）"""
        with self.lock:
            return tuple(self.history)

    def __len__(self):
        with self.lock:
            return len(self.history)

    def subscribe(self, callback):
        """注册变化回调，回调参数为最新的历史快照；返回取消订阅的函数"""
        with self.lock:
            self._observers.append(callback)

        def unsubscribe():
            with self.lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def _notify(self):
        snapshot = tuple(self.history)
        for callback in list(self._observers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("历史变化回调出错")
