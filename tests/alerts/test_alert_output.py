import unittest
from unittest.mock import patch

from alerts import AlertConfigurationError, AlertDeliveryError

try:
    from alerts import output
except OSError as error:  # sounddevice raises when PortAudio is not installed
    output = None
    _SKIP_REASON = f"sounddevice unavailable: {error}"
else:
    _SKIP_REASON = ""


@unittest.skipIf(output is None, _SKIP_REASON)
class SynthesizePulseTests(unittest.TestCase):
    def test_pulse_is_float32_faded_and_within_volume(self) -> None:
        wav = output.synthesize_pulse(880.0, 0.25, volume=0.5, sample_rate_hz=1000)

        self.assertEqual(250, len(wav))
        self.assertEqual("float32", str(wav.dtype))
        self.assertEqual(0.0, float(wav[0]))
        self.assertLessEqual(float(abs(wav).max()), 0.5 + 1e-6)

    def test_invalid_parameters_are_rejected(self) -> None:
        invalid = [
            dict(frequency_hz=0.0, duration_seconds=0.25, volume=0.5),
            dict(frequency_hz=880.0, duration_seconds=0.0, volume=0.5),
            dict(frequency_hz=880.0, duration_seconds=0.25, volume=0.0),
            dict(frequency_hz=880.0, duration_seconds=0.25, volume=1.5),
        ]
        for kwargs in invalid:
            with self.subTest(**kwargs):
                with self.assertRaises(AlertConfigurationError):
                    output.synthesize_pulse(
                        kwargs["frequency_hz"],
                        kwargs["duration_seconds"],
                        volume=kwargs["volume"],
                    )


@unittest.skipIf(output is None, _SKIP_REASON)
class SoundDeviceAlertOutputTests(unittest.TestCase):
    def test_play_alert_pulse_is_non_blocking_on_selected_device(self) -> None:
        device = output.SoundDeviceAlertOutput(output_device_index=3, sample_rate_hz=8000)

        with patch("alerts.output.sd.play") as play:
            device.play_alert_pulse()

        play.assert_called_once()
        _, kwargs = play.call_args
        self.assertEqual(8000, kwargs["samplerate"])
        self.assertEqual(3, kwargs["device"])
        self.assertFalse(kwargs["blocking"])

    def test_playback_failure_is_wrapped(self) -> None:
        device = output.SoundDeviceAlertOutput()

        with patch("alerts.output.sd.play", side_effect=RuntimeError("no device")):
            with self.assertRaises(AlertDeliveryError):
                device.play_alert_pulse()


if __name__ == "__main__":
    unittest.main()
