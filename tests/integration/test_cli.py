"""Integration tests for the habit-engine command line"""
import pytest
from unittest.mock import patch

from habit_engine.main import build_parser, cli, run_command


@pytest.fixture
def run(tmp_path, clock, capsys):
    """Invoke the CLI against a temp data dir at the fixed test time"""
    def _run(*argv):
        with patch("habit_engine.main.SystemClock", return_value=clock):
            code = cli(["--data-path", str(tmp_path), *argv])
        return code, capsys.readouterr().out
    return _run


def test_checkin_and_status(run):
    code, out = run("checkin")
    assert code == 0
    assert "Streak: 1 days" in out

    code, out = run("checkin")
    assert code == 1
    assert "Already checked in" in out

    code, out = run("status")
    assert code == 0
    assert "Current streak: 1 days" in out


def test_reminders_commands(run):
    code, out = run("reminders", "add", "Stretch", "06:30", "--days", "0", "6")
    assert code == 0
    assert "Reminder 4 saved" in out

    code, out = run("reminders", "list")
    assert "[4] 06:30 Stretch (Sun,Sat) [on]" in out

    code, out = run("reminders", "add", "Bad", "6:30")
    assert code == 1


def test_challenges_commands(run):
    assert run("challenges", "start", "strength_1")[0] == 0
    code, out = run("challenges", "complete", "strength_1")
    assert "+50 XP" in out

    code, out = run("challenges", "list", "strength")
    assert "[strength_1] FOUNDATIONAL STRENGTH (completed" in out
    assert "Requires 300 strength XP" in out

    code, out = run("xp")
    assert "50 XP" in out


def test_preferences_update(run):
    code, out = run("preferences", "--interests", "Strength", "Cardio", "--notifications", "off")

    assert code == 0
    assert "Interests: strength, cardio" in out
    assert "Notifications: off" in out


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_run_command_unknown_reward(service, capsys):
    args = build_parser().parse_args(["rewards", "claim", "5"])

    assert run_command(service, args) == 1
    assert "Reward 5 not found" in capsys.readouterr().out
