# tests/test_notification_bus.py
import json
import threading

from PySide6.QtWidgets import QWidget

from material_ops.modules.notifications import NotificationBus, RefreshWatcher
from material_ops.utils.tasks import run_task


def test_publish_calls_local_subscribers(bus):
    got = []
    bus.subscribe("intentRefresh", lambda topic, ts: got.append(topic))
    assert bus.publish("intentRefresh") is not None
    assert got == ["intentRefresh"]


def test_unknown_topic_is_ignored(bus):
    got = []
    bus.subscribe("intentRefresh", lambda topic, ts: got.append(topic))
    assert bus.publish("nope") is None
    assert got == []


def test_unsubscribe(bus):
    got = []
    unsub = bus.subscribe("deliveryRefresh", lambda topic, ts: got.append(topic))
    unsub()
    bus.publish("deliveryRefresh")
    assert got == []
    assert bus.subscriber_count("deliveryRefresh") == 0


def test_failing_handler_does_not_block_others(bus):
    got = []

    def boom(topic, ts):
        raise RuntimeError("handler bug")

    bus.subscribe("deliveryRefresh", boom)
    bus.subscribe("deliveryRefresh", lambda topic, ts: got.append(topic))
    bus.publish("deliveryRefresh")
    assert got == ["deliveryRefresh"]


def test_publish_many_dedupes_and_sorts(bus):
    sent = bus.publish_many(["intentRefresh", "deliveryRefresh", "intentRefresh", "bogus"])
    assert sent == ["deliveryRefresh", "intentRefresh"]


def test_stamp_file_written_atomically(bus):
    ts = bus.publish("siteTransferRefresh")
    data = json.loads((bus.signal_dir / "siteTransferRefresh.json").read_text(encoding="utf-8"))
    assert data["topic"] == "siteTransferRefresh"
    assert data["ts"] == ts
    assert data["origin"] == bus.origin
    assert not [p for p in bus.signal_dir.iterdir() if p.name.endswith(".tmp")]


def test_other_instance_is_seen_by_check_signals(tmp_path, qapp):
    sig = tmp_path / "shared"
    a = NotificationBus(signal_dir=str(sig))
    b = NotificationBus(signal_dir=str(sig))
    got = []
    b.subscribe("upcomingDeliveryRefresh", lambda topic, ts: got.append(topic))

    a.publish("upcomingDeliveryRefresh")
    assert b.check_signals() == ["upcomingDeliveryRefresh"]
    assert got == ["upcomingDeliveryRefresh"]
    # already delivered
    assert b.check_signals() == []


def test_own_stamps_are_not_redelivered(bus):
    got = []
    bus.subscribe("intentRefresh", lambda topic, ts: got.append(topic))
    bus.publish("intentRefresh")
    assert bus.check_signals() == []
    assert got == ["intentRefresh"]


def test_corrupt_stamp_is_ignored(bus):
    bus.signal_dir.mkdir(parents=True, exist_ok=True)
    (bus.signal_dir / "intentRefresh.json").write_text("{not json", encoding="utf-8")
    assert bus.check_signals() == []
    assert bus.last_published("intentRefresh") is None


def test_watchdog_delivers_remote_stamp(tmp_path, qtbot):
    sig = tmp_path / "live"
    a = NotificationBus(signal_dir=str(sig))
    b = NotificationBus(signal_dir=str(sig))
    b.start()
    try:
        assert b.running
        with qtbot.waitSignal(b.published, timeout=5000) as blocker:
            a.publish("deliveryRefresh")
        assert blocker.args[0] == "deliveryRefresh"
    finally:
        b.stop()
    assert not b.running


# ---------- RefreshWatcher ----------

def test_watcher_coalesces_topics_into_one_reload(bus, qtbot):
    calls = []
    w = RefreshWatcher(bus, ["intentRefresh", "upcomingDeliveryRefresh"], lambda: calls.append(1))
    bus.publish("intentRefresh")
    bus.publish("upcomingDeliveryRefresh")
    qtbot.waitUntil(lambda: len(calls) == 1, timeout=2000)
    qtbot.wait(300)
    assert len(calls) == 1
    w.stop()


def test_watcher_ignores_other_topics(bus, qtbot):
    calls = []
    w = RefreshWatcher(bus, ["intentRefresh"], lambda: calls.append(1))
    bus.publish("siteTransferRefresh")
    qtbot.wait(300)
    assert calls == []
    w.stop()


def test_stopped_watcher_never_reloads(bus, qtbot):
    calls = []
    w = RefreshWatcher(bus, ["intentRefresh"], lambda: calls.append(1), interval_ms=50)
    assert w.interval == 50
    w.stop()
    bus.publish("intentRefresh")
    w.trigger()
    qtbot.wait(300)
    assert calls == []
    assert w.interval == 0
    assert bus.subscriber_count("intentRefresh") == 0


def test_poll_reloads_without_notifications(bus, qtbot):
    calls = []
    w = RefreshWatcher(bus, ["intentRefresh"], lambda: calls.append(1), interval_ms=100)
    qtbot.waitUntil(lambda: len(calls) >= 1, timeout=2000)
    w.stop()


def test_worker_publish_is_delivered_on_ui_thread(bus, qtbot):
    owner = QWidget()
    qtbot.addWidget(owner)
    threads = []
    bus.subscribe("upcomingDeliveryRefresh", lambda topic, ts: threads.append(threading.current_thread()))
    done = []
    run_task(owner, lambda: bus.publish_many(["upcomingDeliveryRefresh"]), done.append)
    qtbot.waitUntil(lambda: bool(threads and done), timeout=2000)
    assert threads == [threading.main_thread()]
    assert done == [["upcomingDeliveryRefresh"]]


def test_watcher_reloads_after_worker_publish(bus, qtbot):
    owner = QWidget()
    qtbot.addWidget(owner)
    calls = []
    w = RefreshWatcher(bus, ["upcomingDeliveryRefresh"], lambda: calls.append(1))
    run_task(owner, lambda: bus.publish_many(["upcomingDeliveryRefresh", "deliveryRefresh"]))
    qtbot.waitUntil(lambda: len(calls) == 1, timeout=2000)
    w.stop()
