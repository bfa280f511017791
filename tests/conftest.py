import sys
from pathlib import Path

import pytest

# 项目是平铺的模块布局，未安装时也能直接导入
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from clipboard_base import MemoryClipboard  # noqa: E402
from clipboard_worker import ClipboardWorker  # noqa: E402
from history_manager import HistoryManager  # noqa: E402
from history_storage import HistoryStore  # noqa: E402


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def history_path(tmp_path):
    return tmp_path / "data" / "clipboard_history.json"


@pytest.fixture
def store(history_path):
    return HistoryStore(history_path)


@pytest.fixture
def manager(clipboard, store):
    return HistoryManager(clipboard, store)


@pytest.fixture
def worker(manager):
    return ClipboardWorker(manager, poll_interval=0.01)
