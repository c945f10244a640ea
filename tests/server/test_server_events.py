import datetime as dt
import json
import unittest

from server.events import EventJournal, make_event

_NOW = dt.datetime(2026, 2, 21, 10, 0, tzinfo=dt.timezone.utc)


class ServerEventsTests(unittest.TestCase):
    def test_make_event_serializes_timestamp_and_payload(self) -> None:
        raw = make_event("session", now_fn=lambda: _NOW, phase="idle", message="Ready")
        payload = json.loads(raw)

        self.assertEqual("session", payload["type"])
        self.assertEqual(_NOW.isoformat(), payload["timestamp"])
        self.assertEqual("idle", payload["phase"])
        self.assertEqual("Ready", payload["message"])

    def test_journal_does_not_replay_one_shot_events(self) -> None:
        journal = EventJournal(now_fn=lambda: _NOW)
        journal.record("hello", {"message": "hi"})
        journal.record("notification", {"alert_id": "workSessionEnd"})

        self.assertEqual([], journal.replay())

    def test_journal_replays_error_before_session(self) -> None:
        journal = EventJournal(now_fn=lambda: _NOW)
        journal.record("session", {"phase": "working", "accepted": False})
        journal.record("error", {"message": "Cannot start work: not idle"})

        decoded_types = [json.loads(item)["type"] for item in journal.replay()]
        self.assertEqual(["error", "session"], decoded_types)

    def test_accepted_session_update_clears_error(self) -> None:
        journal = EventJournal(now_fn=lambda: _NOW)
        journal.record("error", {"message": "Cannot tick: suspended"})
        journal.record("session", {"phase": "working", "accepted": True})

        decoded_types = [json.loads(item)["type"] for item in journal.replay()]
        self.assertEqual(["session"], decoded_types)

    def test_journal_keeps_latest_payload_per_type(self) -> None:
        journal = EventJournal(now_fn=lambda: _NOW)
        journal.record("session", {"display_seconds": 10})
        journal.record("session", {"display_seconds": 9})

        self.assertEqual(1, len(journal.replay()))
        self.assertEqual({"display_seconds": 9}, journal.latest_payload("session"))
        self.assertIsNone(journal.latest_payload("error"))


if __name__ == "__main__":
    unittest.main()
