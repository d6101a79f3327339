from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class SpeakerPort:
    def speak(self, text: str) -> None: ...


class InMemorySpeaker:
    """Records spoken text instead of playing it (tests, headless hosts)."""

    def __init__(self):
        self.spoken: list[str] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)


class Pyttsx3Speaker:
    """Fire-and-forget speech through pyttsx3 on a single background thread."""

    def __init__(self, rate: Optional[int] = None):
        import pyttsx3
        self._pyttsx3 = pyttsx3
        self.rate = rate
        self._queue: "queue.Queue[str]" = queue.Queue()
        self._thread = threading.Thread(target=self._run, name="quotebook-speech", daemon=True)
        self._thread.start()

    def speak(self, text: str) -> None:
        if not text:
            return
        self._queue.put(text)

    def _run(self) -> None:
        # the engine belongs to the thread that drives it
        engine = None
        while True:
            text = self._queue.get()
            try:
                if engine is None:
                    engine = self._pyttsx3.init()
                    if self.rate:
                        engine.setProperty("rate", self.rate)
                engine.say(text)
                engine.runAndWait()
            except Exception as e:
                logger.warning("speech failed: %s", e)
                engine = None
            finally:
                self._queue.task_done()
