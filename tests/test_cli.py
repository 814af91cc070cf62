"""Command line tests."""

import pytest

from skillpath.cli import main


@pytest.fixture
def run(settings, monkeypatch):
    monkeypatch.delenv("SKILLPATH_USER", raising=False)

    def _run(*args, user="ana@example.com"):
        argv = ["--db", str(settings.db_path), "--content-dir", str(settings.content_dir)]
        if user:
            argv += ["--user", user]
        return main(argv + list(args))

    return _run


class TestCli:

    def test_init_db(self, run, settings, capsys):
        assert run("init-db", user=None) == 0
        assert settings.db_path.exists()
        assert "Database ready" in capsys.readouterr().out

    def test_tree(self, run, capsys):
        assert run("tree", "maths") == 0
        out = capsys.readouterr().out
        assert "maths: 0/3 nodes" in out
        assert "○ FRA-101" in out
        assert "◌ FRA-103" in out
        assert "requires: FRA-101, FRA-102" in out

    def test_lesson(self, run, capsys):
        assert run("lesson", "maths", "FRA-101-L1") == 0
        out = capsys.readouterr().out
        assert "[MCQ] What is 1/2 of 4?" in out

    def test_complete_and_profile(self, run, capsys):
        assert run("complete", "maths", "FRA-102-L1") == 0
        out = capsys.readouterr().out
        assert "+10 XP, +5 gems" in out
        assert "Node FRA-102 completed!" in out

        assert run("complete", "maths", "FRA-102-L1") == 0
        assert "already completed" in capsys.readouterr().out

        assert run("profile") == 0
        out = capsys.readouterr().out
        assert "ana: level 1, 10/50 XP" in out
        assert "Gems: 5" in out

    def test_requires_user(self, run, capsys):
        assert run("complete", "maths", "FRA-101-L1", user=None) == 1
        assert "Not authenticated" in capsys.readouterr().err

    def test_unknown_topic(self, run, capsys):
        assert run("tree", "history") == 1
        assert "Topic not found: history" in capsys.readouterr().err

    def test_unreadable_topic_file(self, run, settings, capsys):
        (settings.content_dir / "topics" / "latin.json").write_bytes(b'{"topic": "\xff\xfe"}')
        assert run("tree", "latin") == 1
        assert "Could not parse" in capsys.readouterr().err

    def test_shop_flow(self, run, capsys):
        assert run("add-item", "--id", "hat", "--name", "Hat", "--price", "5") == 0
        assert run("add-item", "--id", "x2", "--name", "Double XP", "--price", "50",
                   "--multiplier", "2", "--duration", "15") == 0
        capsys.readouterr()

        assert run("shop") == 0
        out = capsys.readouterr().out
        assert "hat: Hat - 5 gems" in out
        assert "2.0x XP for 15 min" in out

        assert run("buy", "hat") == 1
        assert "Insufficient gems" in capsys.readouterr().err

        run("complete", "maths", "FRA-101-L1")
        assert run("buy", "hat") == 0
        assert "gems left: 0" in capsys.readouterr().out

        assert run("inventory") == 0
        assert "hat: 1" in capsys.readouterr().out

    def test_partial_boost_rejected(self, run, capsys):
        assert run("add-item", "--id", "x2", "--name", "Double XP", "--price", "50", "--multiplier", "2") == 2
        assert "--duration" in capsys.readouterr().err

    def test_leaderboard(self, run, capsys):
        run("complete", "maths", "FRA-101-L1")
        run("complete", "maths", "FRA-101-L1", user="bo@example.com")
        run("complete", "maths", "FRA-101-L2", user="bo@example.com")
        capsys.readouterr()

        assert run("leaderboard", "--weekly") == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].endswith("bo - 20 XP (level 1)")
        assert lines[1].endswith("ana - 10 XP (level 1)")
        assert lines[2] == "Your rank: 2"
