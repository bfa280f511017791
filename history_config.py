# 配置与常量定义
import os

import platformdirs

APP_NAME = "ClipboardHistory"          # 应用名（用于用户数据目录）
POLL_INTERVAL = 1.0                    # 剪贴板轮询间隔（秒）
HISTORY_FILE = "clipboard_history.json"  # 历史记录文件名
PREVIEW_LINES = 5                      # 文本预览最多显示的行数
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def get_history_path(data_dir=None):
    """返回历史记录文件路径，目录不存在时自动创建"""
    if data_dir is None:
        data_dir = platformdirs.user_data_dir(APP_NAME, appauthor=False)
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, HISTORY_FILE)
