"""
Text-to-speech for driver announcements.
"""

import logging
import threading
import platform
import subprocess
import queue

from road_safety import config
from road_safety.risk_assessment.hazard_classifier import Severity

logger = logging.getLogger(__name__)

class SpeechAlertSystem:
    """
    Speaks announcements on a background thread.

    Only the newest announcement is kept: a message that arrives while another
    is still waiting replaces it, so the driver never hears a stale alert.
    """

    def __init__(self, rates=None):
        """
        Initialize the speech alert system.

        Args:
            rates: Mapping of severity label to speech rate (words per minute)
        """
        self.active = True
        self.rates = rates or getattr(config, "SPEECH_RATES", {})
        self.pending = queue.Queue(maxsize=1)
        self.system = platform.system()
        self.available = True

        self.worker = threading.Thread(target=self._speech_worker, daemon=True)
        self.worker.start()

        logger.info(f"Speech alert system initialized ({self.system})")

    def __call__(self, text, severity=Severity.SAFE):
        self.speak(text, severity)

    def speak(self, text, severity=Severity.SAFE):
        """
        Queue a message, replacing any message not yet spoken.

        Args:
            text: The text to speak
            severity: Severity of the alert, used to pick the speech rate
        """
        if not self.active or not self.available:
            return

        try:
            self.pending.get_nowait()
        except queue.Empty:
            pass
        self.pending.put_nowait((text, severity))

    def _speech_worker(self):
        """Background thread speaking queued messages one at a time."""
        while self.active:
            try:
                text, severity = self.pending.get(timeout=0.1)
            except queue.Empty:
                continue
            self._do_speak(text, self.rates.get(severity.label, 175))

    def _command(self, text, rate):
        if self.system == 'Windows':
            # SAPI rate runs -10..10 with 0 at roughly 175 wpm
            sapi_rate = max(-10, min(10, (rate - 175) // 15))
            escaped = text.replace("'", "''")
            return ['powershell', '-command',
                    'Add-Type -AssemblyName System.Speech; '
                    '$speak = New-Object System.Speech.Synthesis.SpeechSynthesizer; '
                    f"$speak.Rate = {sapi_rate}; $speak.Speak('{escaped}')"]
        if self.system == 'Darwin':
            return ['say', '-r', str(rate), text]
        return ['espeak', '-s', str(rate), '-a', '150', text]

    def _do_speak(self, text, rate):
        """Run the platform text-to-speech command."""
        try:
            subprocess.run(self._command(text, rate),
                           stdout=subprocess.DEVNULL,
                           stderr=subprocess.DEVNULL)
        except FileNotFoundError:
            logger.warning("No text-to-speech command found, speech alerts disabled")
            self.available = False
        except Exception as e:
            logger.error(f"Error using text-to-speech: {e}")

    def shutdown(self):
        """Shutdown the speech alert system."""
        self.active = False
        if self.worker.is_alive():
            self.worker.join(timeout=1.0)
        logger.info("Speech alert system shut down")
