"""Auto-reply scheduling: jitter bounds, cancellation, last-intent-wins."""

import random
import threading

import pytest

from honeyguard.outbox import InjectionOutbox
from honeyguard.models import InjectionCommand
from honeyguard.scheduler import AutoReplyScheduler
from honeyguard.sessions import ConversationTracker


class Recorder:
    def __init__(self) -> None:
        self.commands = []
        self.fired = threading.Event()

    def __call__(self, command) -> None:
        self.commands.append(command)
        self.fired.set()


def test_delay_is_within_bounds():
    scheduler = AutoReplyScheduler(injector=Recorder(), rng=random.Random(7))
    for i in range(50):
        reply = scheduler.schedule(f"s{i}", "hi")
        assert 2000 <= reply.delay_ms <= 6000
    assert scheduler.cancel_all() == 50


def test_reply_is_injected_when_timer_fires():
    recorder = Recorder()
    scheduler = AutoReplyScheduler(injector=recorder, min_delay_ms=0, max_delay_ms=10)
    scheduler.schedule("wa-session-1", "Sir what is the OTP for?")
    assert recorder.fired.wait(timeout=2)
    command = recorder.commands[0]
    assert command.action == "injectReply"
    assert command.text == "Sir what is the OTP for?"
    assert command.sessionId == "wa-session-1"
    assert scheduler.pending("wa-session-1") is None


def test_cancel_before_fire_injects_nothing():
    recorder = Recorder()
    scheduler = AutoReplyScheduler(injector=recorder, min_delay_ms=200, max_delay_ms=200)
    reply = scheduler.schedule("s", "hello")
    assert scheduler.cancel("s") is True
    assert reply.cancelled
    assert not recorder.fired.wait(timeout=0.5)
    assert recorder.commands == []
    assert scheduler.cancel("s") is False


def test_second_schedule_replaces_first():
    recorder = Recorder()
    scheduler = AutoReplyScheduler(injector=recorder, min_delay_ms=100, max_delay_ms=100)
    first = scheduler.schedule("s", "first")
    second = scheduler.schedule("s", "second")
    assert first.cancelled
    assert scheduler.pending("s") is second
    assert recorder.fired.wait(timeout=2)
    assert [c.text for c in recorder.commands] == ["second"]
    assert scheduler.pending_count() == 0


def test_stale_session_is_suppressed_at_fire_time():
    recorder = Recorder()
    live = {"s": True}
    scheduler = AutoReplyScheduler(
        injector=recorder,
        is_live=lambda session_id: live[session_id],
        min_delay_ms=100,
        max_delay_ms=100,
    )
    reply = scheduler.schedule("s", "hello")
    live["s"] = False
    assert not recorder.fired.wait(timeout=0.5)
    assert recorder.commands == []
    assert reply.cancelled and not reply.fired


def test_injector_errors_do_not_escape():
    done = threading.Event()

    def broken(command):
        done.set()
        raise RuntimeError("tab closed")

    scheduler = AutoReplyScheduler(injector=broken, min_delay_ms=0, max_delay_ms=0)
    reply = scheduler.schedule("s", "hello")
    assert done.wait(timeout=2)
    assert reply.fired


def test_outbox_receives_commands():
    outbox = InjectionOutbox(capacity=2)
    recorder_done = threading.Event()

    def inject(command):
        outbox.push(command)
        recorder_done.set()

    scheduler = AutoReplyScheduler(injector=inject, min_delay_ms=0, max_delay_ms=0)
    scheduler.schedule("s", "hello")
    assert recorder_done.wait(timeout=2)
    drained = outbox.drain()
    assert [c.text for c in drained] == ["hello"]
    assert outbox.drain() == []


def test_invalid_bounds():
    with pytest.raises(ValueError):
        AutoReplyScheduler(injector=Recorder(), min_delay_ms=500, max_delay_ms=100)


def _wired(min_delay_ms=0, max_delay_ms=0):
    """Tracker, outbox and scheduler connected the same way the app does it."""
    holder = {}
    outbox = InjectionOutbox(is_live=lambda session_id: holder["tracker"].is_live(session_id))
    delivered = threading.Event()

    def inject(command):
        outbox.push(command)
        delivered.set()

    scheduler = AutoReplyScheduler(
        injector=inject,
        is_live=lambda session_id: holder["tracker"].is_live(session_id),
        min_delay_ms=min_delay_ms,
        max_delay_ms=max_delay_ms,
    )

    def retire(session_id):
        scheduler.cancel(session_id)
        outbox.discard(session_id)

    holder["tracker"] = ConversationTracker(on_retire=retire)
    return holder["tracker"], outbox, scheduler, delivered


def test_fired_reply_is_not_delivered_after_chat_switch():
    tracker, outbox, scheduler, delivered = _wired()
    scammer = tracker.switch_chat("Scammer")
    scheduler.schedule(scammer, "decoy for scammer")
    assert delivered.wait(timeout=2)
    assert len(outbox) == 1

    tracker.switch_chat("Mom")
    assert outbox.drain() == []


def test_reply_fired_without_switch_is_delivered():
    tracker, outbox, scheduler, delivered = _wired()
    scammer = tracker.switch_chat("Scammer")
    scheduler.schedule(scammer, "decoy for scammer")
    assert delivered.wait(timeout=2)
    assert [(c.sessionId, c.text) for c in outbox.drain()] == [(scammer, "decoy for scammer")]


def test_drain_drops_commands_pushed_for_a_retired_session():
    tracker, outbox, _, _ = _wired()
    scammer = tracker.switch_chat("Scammer")
    mom = tracker.switch_chat("Mom")
    # late push that raced with the switch
    outbox.push(InjectionCommand(text="decoy for scammer", sessionId=scammer))
    outbox.push(InjectionCommand(text="hi mom", sessionId=mom))
    assert [c.text for c in outbox.drain()] == ["hi mom"]


def test_discard_only_removes_that_session():
    outbox = InjectionOutbox()
    outbox.push(InjectionCommand(text="a", sessionId="s1"))
    outbox.push(InjectionCommand(text="b", sessionId="s2"))
    outbox.push(InjectionCommand(text="c", sessionId="s1"))
    assert outbox.discard("s1") == 2
    assert outbox.discard("s1") == 0
    assert [c.text for c in outbox.drain()] == ["b"]
