import json
import logging
import os
import tempfile

from history_config import get_history_path
from history_errors import StorageError
from history_models import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    """把完整的历史记录保存为一个 JSON 文件

    path 可以是文件路径，也可以是返回路径的函数；默认放在用户数据目录下。
    每次保存都整体重写文件，不做追加。
    """

    def __init__(self, path=None):
        self._path = path or get_history_path

    @property
    def path(self):
        path = self._path() if callable(self._path) else self._path
        return os.fspath(path)

    def load(self):
        """读取历史记录，文件不存在或为空时返回空列表"""
        path = self.path
        if not os.path.exists(path):
            return []
        try:
            if os.path.getsize(path) == 0:
                return []
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError, MemoryError) as e:
            # 嵌套过深或文件过大的 JSON 也算格式错误
            raise StorageError(f"读取历史文件失败: {e}") from e

        if not isinstance(data, list):
            raise StorageError("历史文件格式错误: 顶层不是数组")
        try:
            entries = [HistoryEntry.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(f"历史文件格式错误: {e}") from e
        logger.debug("从 %s 读取 %d 条历史", path, len(entries))
        return entries

    def save(self, entries):
        """整体写入历史记录（先写临时文件再替换）"""
        path = self.path
        data = [entry.to_dict() for entry in entries]
        directory = os.path.dirname(path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"保存历史记录失败: {e}") from e
