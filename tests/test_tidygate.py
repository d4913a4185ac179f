"""Tests for the tidygate command line."""

from pathlib import Path

import pytest

from tidygate import check_commit
from tidygate.core import config as config_module
from tidygate.core.model import StagedFile
from tidygate.tidygate import main, read_commit_message

ORIGINAL = "<?php\nif ($a) {\n\techo 1;   \n}\n"
FORMATTED = "<?php\nif ($a) {\n    echo 1;\n}\n"


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "USER_CONFIG", tmp_path / "no-user-config.toml")
    monkeypatch.delenv(config_module.ENV_CONFIG, raising=False)


@pytest.fixture
def message(tmp_path):
    def _write(text: str):
        path = tmp_path / "COMMIT_EDITMSG"
        path.write_text(text)
        return str(path)

    return _write


class TestReadCommitMessage:
    def test_drops_comments(self, tmp_path):
        path = tmp_path / "msg"
        path.write_text("PROJ-1 fix\n# PROJ-1 [Format] from the template\nbody\n")
        assert read_commit_message(path) == "PROJ-1 fix\nbody"

    def test_stops_at_scissors(self, tmp_path):
        path = tmp_path / "msg"
        path.write_text(
            "PROJ-1 fix\n# ------------------------ >8 ------------------------\n"
            "diff --git a/x b/x\n+PROJ-2 [Format]\n"
        )
        assert read_commit_message(path) == "PROJ-1 fix"


class TestMain:
    def test_whitespace_only_untagged_fails(self, repo, chdir, message, capsys):
        repo.commit({"a.php": "a\n"})
        repo.stage("a.php", "a   \n")
        chdir(repo.root)

        assert main([message("PROJ-1 tidy\n")]) == 1
        err = capsys.readouterr().err
        assert "tidygate [whitespace]" in err
        assert '"[Whitespace]"' in err

    def test_whitespace_only_tagged_passes(self, repo, chdir, message, capsys):
        repo.commit({"a.php": "a\n"})
        repo.stage("a.php", "a   \n")
        chdir(repo.root)

        assert main([message("PROJ-1 [Whitespace] tidy\n")]) == 0
        assert capsys.readouterr().err == ""

    def test_nothing_staged_skips(self, repo, chdir, message):
        chdir(repo.root)
        assert main([message("anything\n")]) == 0

    def test_project_config_and_check_override(self, repo, chdir, message, fake_fixer):
        (repo.root / ".tidygate.toml").write_text(
            f'checks = ["whitespace"]\n[format_php]\nfixer_path = "{fake_fixer}"\n'
        )
        repo.commit({"a.php": ORIGINAL})
        repo.stage("a.php", FORMATTED)
        chdir(repo.root)

        # tabs to spaces is also whitespace-only, and the message lacks [Whitespace]
        assert main([message("PROJ-5 [Format] reflow\n")]) == 1
        assert main([message("PROJ-5 [Format] reflow\n"), "--check", "format_php"]) == 0

    def test_explicit_config(self, repo, chdir, message, tmp_path, fake_fixer):
        config = tmp_path / "gate.toml"
        config.write_text(
            'checks = ["formatting"]\n'
            f'[formatting.fixer_config.black]\nfixer_path = "{fake_fixer}"\n'
        )
        repo.commit({"a.php": ORIGINAL})
        repo.stage("a.php", FORMATTED)
        repo.stage("n.php", FORMATTED)
        chdir(repo.root)

        assert main([message("PROJ-6 [Format] reflow\n"), "--config", str(config), "--jobs", "2"]) == 1

    def test_configuration_error_exits_2(self, repo, chdir, message, capsys):
        (repo.root / ".tidygate.toml").write_text("[formatting.fixer_config.prettier]\n")
        chdir(repo.root)

        assert main([message("PROJ-7\n")]) == 2
        assert 'Invalid fixer name "prettier"' in capsys.readouterr().err

    def test_bad_jobs_exits_2(self, repo, chdir, message):
        chdir(repo.root)
        assert main([message("PROJ-8\n"), "--jobs", "0"]) == 2

    def test_outside_repository(self, tmp_path, chdir, message, capsys):
        work = tmp_path / "work"
        work.mkdir()
        chdir(work)
        assert main([message("PROJ-9\n")]) == 1
        assert "Failed to list staged files" in capsys.readouterr().err

    def test_missing_message_file(self, repo, chdir, tmp_path, capsys):
        chdir(repo.root)
        assert main([str(tmp_path / "no-such-message")]) == 1
        assert "cannot read commit message" in capsys.readouterr().err


def test_check_commit(repo, make_config):
    repo.commit({"a.php": "a\n"})
    repo.stage("a.php", "b\n")

    results = check_commit("PROJ-1 change", (StagedFile.from_path("a.php"),), make_config(), repo.root)
    assert [(name, verdict.status) for name, verdict in results] == [("whitespace", "pass")]


def test_check_commit_runs_fixers_in_repository(repo, make_config, make_fixer, tmp_path, chdir):
    fixer = repo.root / "fmt"
    fixer.write_bytes(Path(make_fixer()).read_bytes())
    fixer.chmod(0o755)
    repo.commit({"a.php": ORIGINAL})
    a = repo.stage("a.php", FORMATTED)
    config = make_config(formatting={"fixer_config": {"black": {"fixer_path": "./fmt"}}})
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    chdir(elsewhere)

    results = check_commit("PROJ-1 [Format] reflow", (a,), config, cwd=repo.root, checks=["formatting"])
    assert [(name, verdict.status) for name, verdict in results] == [("formatting", "pass")]


def test_check_commit_logs_nothing_below_warning(repo, make_config, capsys):
    repo.commit({"a.php": "a\n"})
    repo.stage("a.php", "b\n")

    check_commit("PROJ-1 change", (StagedFile.from_path("a.php"),), make_config(), repo.root)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
