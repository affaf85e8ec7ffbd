"""Audio input that replays a sound file at real-time pace."""

import threading
import time
from typing import Optional

import soundfile as sf

from ..errors import AudioDeviceError
from ..logger import get_logger
from .rolling_input import RollingAudioInput

logger = get_logger(__name__)


class WavFileInput(RollingAudioInput):
    """Plays a recorded voice into the rolling frame, for practice without a microphone
    and for reproducible demos.
    """

    def __init__(
        self,
        file_path: str,
        frame_size: int = 2048,
        chunk_size: int = 512,
        loop: bool = False,
        gain: float = 1.0,
    ):
        try:
            info = sf.info(file_path)
        except (RuntimeError, OSError) as e:
            raise AudioDeviceError(f"Cannot open audio file {file_path}: {e}") from e

        super().__init__(info.samplerate, frame_size)
        self._channels = info.channels
        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._thread: Optional[threading.Thread] = None

    @property
    def channels(self) -> int:
        return self._channels

    def start(self) -> bool:
        if self._running:
            return True

        self._clear()
        self._running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()
        logger.info(f"Streaming {self._file_path} at {self.sample_rate}Hz")
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread:
            self._thread.join()
            self._thread = None
        self._clear()

    def _stream_data(self) -> None:
        """Feed the file into the rolling frame one chunk at a time."""
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._running:
                    block = f.read(self._chunk_size, dtype="float32", always_2d=True)
                    if not len(block):
                        if not self._loop or not f.frames:
                            break
                        f.seek(0)
                        continue

                    self._write(block * self._gain)
                    # Keep pace with a live microphone
                    time.sleep(len(block) / self.sample_rate)
        except (RuntimeError, OSError) as e:
            logger.error(f"Error streaming {self._file_path}: {e}")

        self._running = False
        logger.info(f"Finished streaming {self._file_path}")
