"""Live microphone input using the sounddevice library."""

from __future__ import annotations
from typing import Any, ClassVar, Dict, List, Optional, Tuple

import numpy as np
import sounddevice as sd

from ..errors import AudioDeviceError
from ..logger import get_logger
from .rolling_input import RollingAudioInput

logger = get_logger(__name__)

COMMON_RATES: Tuple[int, ...] = (44100, 48000, 22050, 16000, 8000)


def _accepts(device: Optional[int], rate: int, channels: int = 1) -> bool:
    try:
        sd.check_input_settings(device=device, samplerate=rate, channels=channels)
    except Exception as e:
        logger.debug(f"Device {device} rejects {rate}Hz x{channels}: {e}")
        return False
    return True


def list_input_devices() -> List[Dict[str, Any]]:
    """Describe every device with input channels and the rates it accepts."""
    found = []
    for index, info in enumerate(sd.query_devices()):
        if info["max_input_channels"] < 1:
            continue
        found.append(
            {
                "id": index,
                "name": info["name"],
                "channels": info["max_input_channels"],
                "default_samplerate": info["default_samplerate"],
                "supported_rates": [rate for rate in COMMON_RATES if _accepts(index, rate)],
            }
        )
    return found


class SoundDeviceInput(RollingAudioInput):
    """Microphone input that keeps the latest analysis frame up to date.

    sounddevice calls back with small blocks on its own thread; each block is
    shifted into the rolling frame that ``read_frame`` hands to the estimator.
    """

    SAMPLE_RATE: ClassVar[int] = 44100
    FRAME_SIZE: ClassVar[int] = 2048  # Samples per pitch estimate
    BLOCK_SIZE: ClassVar[int] = 512  # Samples per stream callback
    CHANNELS: ClassVar[int] = 1

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frame_size: Optional[int] = None,
        block_size: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Pick a working device and sample rate.

        Args:
            device_id: Input device index, or None for the system default
            sample_rate: Preferred rate in Hz (default 44100); others are tried if refused
            frame_size: Samples per analysis frame (default 2048)
            block_size: Samples per stream callback (default 512)
            channels: Channels to capture (default 1); mixed down to mono

        Raises:
            AudioDeviceError: If neither the device nor the default input accepts any rate
        """
        super().__init__(sample_rate or self.SAMPLE_RATE, frame_size or self.FRAME_SIZE)
        self._block_size = block_size or self.BLOCK_SIZE
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None
        self._device_id, self._sample_rate = self._negotiate(device_id, self._sample_rate)

    @property
    def device_id(self) -> Optional[int]:
        return self._device_id

    def _negotiate(self, device_id: Optional[int], preferred: int) -> Tuple[Optional[int], int]:
        """First (device, rate) pair the driver accepts, preferring the requested ones."""
        rates = [preferred] + [rate for rate in COMMON_RATES if rate != preferred]
        candidates = [device_id, None] if device_id is not None else [None]

        for device in candidates:
            for rate in rates:
                if _accepts(device, rate, self._channels):
                    if (device, rate) != (device_id, preferred):
                        logger.warning(
                            f"Using device {device} at {rate}Hz instead of {device_id} at {preferred}Hz"
                        )
                    logger.info(f"Audio device ready: device={device}, rate={rate}Hz")
                    return device, rate

        raise AudioDeviceError(
            f"No usable sample rate for input device {device_id} or the default input"
        )

    def _audio_callback(self, indata: np.ndarray, _frames: int, _time_info, status) -> None:
        # Runs on the PortAudio thread: copy the block in and return
        if status:
            logger.warning(f"Input stream status: {status}")
        self._write(indata)

    def start(self) -> bool:
        """Open and start the input stream.

        Returns:
            False if the stream could not be opened
        """
        if self._running:
            return True

        self._clear()
        try:
            stream = sd.InputStream(
                device=self._device_id,
                channels=self._channels,
                samplerate=self._sample_rate,
                blocksize=self._block_size,
                dtype="float32",
                callback=self._audio_callback,
            )
            stream.start()
        except Exception as e:
            logger.error(f"Could not open input stream: {e}")
            return False

        self._stream = stream
        self._running = True
        logger.info(f"Listening on device {self._device_id} at {self._sample_rate}Hz")
        return True

    def stop(self) -> None:
        """Stop and close the input stream."""
        stream, self._stream = self._stream, None
        self._running = False
        if stream is not None:
            stream.stop()
            stream.close()
        self._clear()
        logger.info("Microphone closed")
