"""剪贴板历史的异常类型。

后台轮询线程只记录这些异常，不会因此退出；
由调用方（界面、命令行）决定如何提示用户。
"""


class ClipboardHistoryError(Exception):
    """所有剪贴板历史异常的基类"""


class ClipboardError(ClipboardHistoryError):
    """剪贴板后端读写失败"""


class StorageError(ClipboardHistoryError):
    """历史文件读取或写入失败"""


class EntryNotFoundError(ClipboardHistoryError, KeyError):
    """按 id 找不到历史条目"""

    def __init__(self, entry_id):
        super().__init__(entry_id)
        self.entry_id = entry_id

    def __str__(self):
        return f"历史条目不存在: {self.entry_id}"
