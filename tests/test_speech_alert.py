import time

import pytest

from road_safety.risk_assessment.hazard_classifier import Severity
from road_safety.ui import speech_alert
from road_safety.ui.speech_alert import SpeechAlertSystem


@pytest.fixture
def spoken(monkeypatch):
    commands = []
    monkeypatch.setattr(speech_alert.subprocess, "run", lambda command, **kwargs: commands.append(command))
    return commands


@pytest.fixture
def speech():
    system = SpeechAlertSystem(rates={"danger": 210, "warning": 175, "safe": 155})
    yield system
    system.shutdown()


def wait_for(condition, timeout=2.0):
    deadline = time.time() + timeout
    while not condition() and time.time() < deadline:
        time.sleep(0.01)
    return condition()


def test_speaks_with_severity_rate(spoken, speech):
    speech.system = "Linux"
    speech.speak("Stop immediately. Animal on Road ahead.", Severity.DANGER)

    assert wait_for(lambda: len(spoken) == 1)
    assert spoken[0] == ['espeak', '-s', '210', '-a', '150', "Stop immediately. Animal on Road ahead."]


def test_callable_as_announcer(spoken, speech):
    speech.system = "Darwin"
    speech("Road clear. Proceed safely.", Severity.SAFE)

    assert wait_for(lambda: len(spoken) == 1)
    assert spoken[0] == ['say', '-r', '155', "Road clear. Proceed safely."]


def test_windows_command_escapes_quotes(speech):
    speech.system = "Windows"
    command = speech._command("Driver's side", 175)

    assert command[0] == 'powershell'
    assert "$speak.Rate = 0" in command[-1]
    assert "'Driver''s side'" in command[-1]


def test_missing_tts_disables_speech(monkeypatch, speech):
    def missing(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(speech_alert.subprocess, "run", missing)
    speech.speak("Caution. Stop Sign. Reduce speed.", Severity.WARNING)

    assert wait_for(lambda: not speech.available)
    speech.speak("ignored", Severity.WARNING)
    assert speech.pending.empty()


def test_newest_message_replaces_pending(speech):
    speech.active = False
    speech.worker.join(timeout=1.0)
    speech.active = True

    speech.speak("first", Severity.WARNING)
    speech.speak("second", Severity.DANGER)

    assert speech.pending.qsize() == 1
    assert speech.pending.get_nowait() == ("second", Severity.DANGER)
