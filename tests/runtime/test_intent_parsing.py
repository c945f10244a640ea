import json
import unittest

from runtime.intents import (
    IntentParseError,
    LifecycleIntent,
    ResetIntent,
    RestConfirmationIntent,
    RestPromptIntent,
    StartConfirmationIntent,
    StartIntent,
    TouchIntent,
    parse_intent,
)


def _message(**payload) -> str:
    return json.dumps(payload)


class IntentParsingTests(unittest.TestCase):
    def test_parses_every_intent_type(self) -> None:
        cases = [
            (_message(type="start"), StartIntent()),
            (_message(type="touch", side="Left", held=True), TouchIntent("left", True)),
            (_message(type="rest_prompt", choice="exit"), RestPromptIntent("exit")),
            (
                _message(type="rest_confirmation", confirmed=False),
                RestConfirmationIntent(False),
            ),
            (
                _message(type="start_confirmation", confirmed=True),
                StartConfirmationIntent(True),
            ),
            (_message(type="reset"), ResetIntent(restart=False)),
            (_message(type="reset", restart=True), ResetIntent(restart=True)),
            (_message(type="lifecycle", state="background"), LifecycleIntent("background")),
        ]
        for message, expected in cases:
            with self.subTest(message=message):
                self.assertEqual(expected, parse_intent(message))

    def test_rejects_malformed_messages(self) -> None:
        invalid = [
            "not json",
            json.dumps(["start"]),
            _message(type="launch"),
            _message(type="touch", side="middle", held=True),
            _message(type="touch", side="left", held="yes"),
            _message(type="rest_prompt", choice="nap"),
            _message(type="rest_confirmation"),
            _message(type="reset", restart="true"),
            _message(type="lifecycle", state="sleeping"),
        ]
        for message in invalid:
            with self.subTest(message=message):
                with self.assertRaises(IntentParseError):
                    parse_intent(message)


if __name__ == "__main__":
    unittest.main()
