from road_safety.risk_assessment.alert_state import Alert, ControlState
from road_safety.risk_assessment.hazard_classifier import Severity
from road_safety.risk_assessment.notification_gate import announce, announcement_text, should_announce


def make_alert(severity, confidence=0.9, condition="Animal on Road"):
    return Alert(severity, condition, confidence, 10.0, 0)


def count_announcements(severities, state=None):
    state = state or ControlState(60)
    count = 0
    for severity in severities:
        alert = make_alert(severity)
        if should_announce(alert, state, True):
            state = announce(alert, state)
            count += 1
    return count


def test_sound_disabled_never_announces():
    alert = make_alert(Severity.DANGER)
    assert not should_announce(alert, ControlState(60), False)


def test_low_confidence_never_announces():
    assert not should_announce(make_alert(Severity.DANGER, confidence=0.49), ControlState(60), True)
    assert should_announce(make_alert(Severity.DANGER, confidence=0.5), ControlState(60), True)
    assert not should_announce(make_alert(Severity.DANGER, confidence=0.55), ControlState(60), True,
                               confidence_threshold=0.6)


def test_repeated_safe_announced_at_most_once():
    assert count_announcements([Severity.SAFE, Severity.SAFE]) == 1
    assert count_announcements([Severity.SAFE, Severity.SAFE], ControlState(60, Severity.SAFE)) == 0


def test_warning_episode_then_all_clear():
    assert count_announcements([Severity.SAFE, Severity.WARNING, Severity.SAFE]) == 3
    assert count_announcements([Severity.SAFE, Severity.WARNING, Severity.SAFE],
                               ControlState(60, Severity.SAFE)) == 2


def test_episode_announced_once():
    severities = [Severity.WARNING] * 5 + [Severity.SAFE] * 5
    assert count_announcements(severities, ControlState(60, Severity.SAFE)) == 2


def test_escalation_is_announced():
    state = ControlState(60, Severity.WARNING)
    assert should_announce(make_alert(Severity.DANGER), state, True)
    assert not should_announce(make_alert(Severity.WARNING), state, True)


def test_announce_records_severity():
    state = announce(make_alert(Severity.DANGER), ControlState(42))
    assert state == ControlState(42, Severity.DANGER)


def test_announcement_text():
    assert announcement_text(make_alert(Severity.DANGER)) == "Stop immediately. Animal on Road ahead."
    assert announcement_text(make_alert(Severity.WARNING, condition="Stop Sign")) == "Caution. Stop Sign. Reduce speed."
    assert announcement_text(make_alert(Severity.SAFE, condition="Road Clear")) == "Road clear. Proceed safely."
