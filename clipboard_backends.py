import hashlib
import io
import logging
import threading
from contextlib import contextmanager

import pyperclip
from PIL import Image, ImageGrab

from clipboard_base import ClipboardBackend, MemoryClipboard
from history_errors import ClipboardError

try:
    import pywintypes
    import win32clipboard
    import win32con
    HAS_WIN32 = True
except ImportError:
    HAS_WIN32 = False

logger = logging.getLogger(__name__)


class PyperclipClipboard(ClipboardBackend):
    """跨平台后端：文本走 pyperclip，图片走 Pillow ImageGrab

    系统没有提供变更计数，这里每次查询时比较内容指纹，指纹变化就把计数加一。

    限制：
    - 其他程序再次复制完全相同的内容时指纹不变，这次复制不会被发现；
      只有本后端自己的写入会额外加一。
    - 每次查询计数都要读取文本和图片，图片还会重新编码为 PNG，开销比原生计数大。
    - 不支持写入图片，write_image_bytes 总是抛出 ClipboardError，且不改动剪贴板。
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._count = 0
        self._fingerprint = None

    def _fingerprint_now(self):
        digest = hashlib.md5()
        digest.update((self.read_text() or "").encode("utf-8"))
        digest.update(b"\0")
        digest.update(self.read_image_bytes() or b"")
        return digest.hexdigest()

    def current_mutation_count(self):
        fingerprint = self._fingerprint_now()
        with self._lock:
            if fingerprint != self._fingerprint:
                if self._fingerprint is not None:
                    self._count += 1
                self._fingerprint = fingerprint
            return self._count

    def read_text(self):
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"读取文本失败: {e}") from e
        return text if isinstance(text, str) and text else None

    def read_image_bytes(self):
        """读取剪贴板图片并保存为 PNG 字节"""
        try:
            img = ImageGrab.grabclipboard()
        except Exception as e:
            # 没有图片工具（xclip / wl-paste）时只当作没有图片
            logger.debug("读取图片失败: %s", e)
            return None
        if not isinstance(img, Image.Image):
            return None
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def _copy(self, text):
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"写入文本失败: {e}") from e
        with self._lock:
            self._count += 1
            self._fingerprint = None

    def write_text(self, text):
        self._copy(text)

    def write_image_bytes(self, data):
        raise ClipboardError("pyperclip 后端不支持写入图片")

    def clear(self):
        self._copy("")


class Win32Clipboard(ClipboardBackend):
    """Windows 原生剪贴板，计数使用 GetClipboardSequenceNumber"""

    def __init__(self):
        if not HAS_WIN32:
            raise ClipboardError("需要安装 pywin32: pip install pywin32")

    @contextmanager
    def _opened(self):
        try:
            win32clipboard.OpenClipboard()
        except pywintypes.error as e:
            raise ClipboardError(f"打开剪贴板失败: {e}") from e
        try:
            yield
        except pywintypes.error as e:
            raise ClipboardError(f"剪贴板操作失败: {e}") from e
        finally:
            win32clipboard.CloseClipboard()

    def current_mutation_count(self):
        return win32clipboard.GetClipboardSequenceNumber()

    def _get(self, fmt):
        with self._opened():
            if not win32clipboard.IsClipboardFormatAvailable(fmt):
                return None
            return win32clipboard.GetClipboardData(fmt)

    def read_text(self):
        text = self._get(win32con.CF_UNICODETEXT)
        return text or None

    def read_image_bytes(self):
        # CF_DIB 原样返回，不做格式转换
        data = self._get(win32con.CF_DIB)
        return data or None

    def write_text(self, text):
        with self._opened():
            win32clipboard.EmptyClipboard()
            win32clipboard.SetClipboardData(win32con.CF_UNICODETEXT, text)

    def write_image_bytes(self, data):
        with self._opened():
            win32clipboard.EmptyClipboard()
            win32clipboard.SetClipboardData(win32con.CF_DIB, data)

    def clear(self):
        with self._opened():
            win32clipboard.EmptyClipboard()


BACKENDS = {
    "memory": MemoryClipboard,
    "pyperclip": PyperclipClipboard,
    "win32": Win32Clipboard,
}


def create_backend(name=None):
    """按名称创建剪贴板后端，未指定时优先使用 Windows 原生后端"""
    if name is None:
        name = "win32" if HAS_WIN32 else "pyperclip"
    try:
        backend_class = BACKENDS[name]
    except KeyError:
        raise ValueError(f"未知的剪贴板后端: {name}") from None
    logger.debug("使用剪贴板后端: %s", name)
    return backend_class()
