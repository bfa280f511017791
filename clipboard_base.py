import threading
from abc import ABC, abstractmethod


class ClipboardBackend(ABC):
    """剪贴板后端接口

    current_mutation_count() 返回一个只增不减的计数，任何进程写入剪贴板都会让它变化。
    轮询时只比较这个计数，计数变化后才读取内容。
    """

    @abstractmethod
    def current_mutation_count(self):
        pass

    @abstractmethod
    def read_text(self):
        """返回文本，没有文本时返回 None"""

    @abstractmethod
    def read_image_bytes(self):
        """返回图片原始字节，没有图片时返回 None"""

    @abstractmethod
    def write_text(self, text):
        """替换剪贴板内容为文本；失败时不改动原有内容"""

    @abstractmethod
    def write_image_bytes(self, data):
        """替换剪贴板内容为图片；失败时不改动原有内容"""

    @abstractmethod
    def clear(self):
        pass


class MemoryClipboard(ClipboardBackend):
    """进程内的剪贴板，用于测试和无图形环境"""

    def __init__(self):
        self._lock = threading.Lock()
        self._count = 0
        self._text = None
        self._image = None

    def current_mutation_count(self):
        with self._lock:
            return self._count

    def read_text(self):
        with self._lock:
            return self._text

    def read_image_bytes(self):
        with self._lock:
            return self._image

    def write_text(self, text):
        with self._lock:
            self._text = text
            self._image = None
            self._count += 1

    def write_image_bytes(self, data):
        with self._lock:
            self._text = None
            self._image = bytes(data)
            self._count += 1

    def clear(self):
        with self._lock:
            self._text = None
            self._image = None
            self._count += 1
