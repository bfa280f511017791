import logging
import time

from clipboard_worker import ClipboardWorker
from history_errors import ClipboardError
from history_models import ImagePayload, TextPayload


def texts(manager):
    return [entry.content.value for entry in manager.entries]


def test_content_present_at_start_is_not_captured(clipboard, manager):
    clipboard.write_text("before start")
    worker = ClipboardWorker(manager)
    assert worker.tick() is None
    assert len(manager) == 0


def test_idle_clipboard_adds_nothing(clipboard, manager, worker):
    clipboard.write_text("once")
    worker.tick()
    worker.tick()
    worker.tick()
    assert texts(manager) == ["once"]


def test_writes_are_recorded_newest_first(clipboard, manager, worker):
    words = ["one", "two", "three", "four"]
    for word in words:
        clipboard.write_text(word)
        worker.tick()
    assert texts(manager) == list(reversed(words))


def test_hello_restore_world_scenario(clipboard, manager, worker):
    clipboard.write_text("hello")
    hello = worker.tick()
    assert texts(manager) == ["hello"]

    manager.restore(hello.id)
    assert worker.tick() is None
    assert texts(manager) == ["hello"]

    clipboard.write_text("world")
    worker.tick()
    assert texts(manager) == ["world", "hello"]


def test_suppression_ignores_content(clipboard, manager, worker):
    clipboard.write_text("a")
    entry = worker.tick()
    manager.restore(entry.id)
    # 下一次变化无论内容是什么都会被跳过
    clipboard.write_text("third party")
    worker.tick()
    assert texts(manager) == ["a"]
    clipboard.write_text("later")
    worker.tick()
    assert texts(manager) == ["later", "a"]


def test_only_latest_state_between_ticks(clipboard, manager, worker):
    clipboard.write_text("lost")
    clipboard.write_text("kept")
    worker.tick()
    assert texts(manager) == ["kept"]


def test_text_checked_before_image(clipboard, manager, worker, monkeypatch):
    clipboard.write_image_bytes(b"img")
    monkeypatch.setattr(clipboard, "read_text", lambda: "caption")
    entry = worker.tick()
    assert entry.content == TextPayload("caption")


def test_image_capture(clipboard, manager, worker):
    clipboard.write_image_bytes(b"II*\x00")
    entry = worker.tick()
    assert entry.content == ImagePayload(b"II*\x00")


def test_cleared_clipboard_is_ignored(clipboard, manager, worker):
    clipboard.clear()
    assert worker.tick() is None
    assert len(manager) == 0


def test_thread_keeps_running_after_failed_tick(clipboard, manager, caplog):
    worker = ClipboardWorker(manager, poll_interval=0.01)
    calls = []
    original = clipboard.current_mutation_count

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise ClipboardError("busy")
        return original()

    clipboard.current_mutation_count = flaky
    with caplog.at_level(logging.ERROR):
        worker.start()
        clipboard.write_text("after failure")
        deadline = time.monotonic() + 5
        while len(manager) == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        worker.stop()
        worker.join(timeout=1)

    assert not worker.is_alive()
    assert texts(manager) == ["after failure"]
    assert "剪贴板检测失败" in caplog.text


def test_unreadable_counter_at_start(clipboard, manager):
    original = clipboard.current_mutation_count

    def broken():
        raise ClipboardError("no display")

    clipboard.current_mutation_count = broken
    worker = ClipboardWorker(manager)
    assert worker.last_count is None

    clipboard.current_mutation_count = original
    clipboard.write_text("x")
    assert worker.tick() is None
    clipboard.write_text("y")
    worker.tick()
    assert texts(manager) == ["y"]


def test_two_restores_suppress_only_one_change(clipboard, manager, worker):
    clipboard.write_text("a")
    entry = worker.tick()
    manager.restore(entry.id)
    manager.restore(entry.id)
    assert worker.tick() is None
    assert texts(manager) == ["a"]
    assert not manager.ignore_next_change

    clipboard.write_text("b")
    worker.tick()
    assert texts(manager) == ["b", "a"]
