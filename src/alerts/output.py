"""Sounddevice-backed playback of the synthesized alarm pulse."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import AlertConfigurationError, AlertDeliveryError

DEFAULT_SAMPLE_RATE_HZ = 44100


def synthesize_pulse(
    frequency_hz: float,
    duration_seconds: float,
    *,
    volume: float = 0.5,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
) -> np.ndarray:
    """Build a mono float32 sine beep with short linear fades at both ends."""
    if frequency_hz <= 0:
        raise AlertConfigurationError("pulse frequency must be greater than zero")
    if duration_seconds <= 0:
        raise AlertConfigurationError("pulse duration must be greater than zero")
    if not 0.0 < volume <= 1.0:
        raise AlertConfigurationError("pulse volume must be in (0, 1]")

    sample_count = max(1, int(round(duration_seconds * sample_rate_hz)))
    t = np.arange(sample_count, dtype=np.float32) / float(sample_rate_hz)
    wav = np.sin(2.0 * np.pi * frequency_hz * t).astype(np.float32) * np.float32(volume)

    fade = min(sample_count // 2, int(0.01 * sample_rate_hz))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade, dtype=np.float32)
        wav[:fade] *= ramp
        wav[-fade:] *= ramp[::-1]
    return wav


class SoundDeviceAlertOutput:
    """Plays the alarm pulse through a selected sounddevice output without blocking."""
    def __init__(
        self,
        *,
        frequency_hz: float = 880.0,
        duration_seconds: float = 0.25,
        volume: float = 0.5,
        output_device_index: Optional[int] = None,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger(__name__)
        self._pulse = synthesize_pulse(
            frequency_hz,
            duration_seconds,
            volume=volume,
            sample_rate_hz=sample_rate_hz,
        )

    def play_alert_pulse(self) -> None:
        self._logger.debug(
            "Playing %d-sample alert pulse at %d Hz",
            len(self._pulse),
            self._sample_rate_hz,
        )
        try:
            sd.play(
                self._pulse,
                samplerate=self._sample_rate_hz,
                device=self._output_device_index,
                blocking=False,
            )
        except Exception as error:
            raise AlertDeliveryError(f"Alert pulse playback failed: {error}") from error
