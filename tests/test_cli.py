import sys

import pytest
import questionary
from click.testing import CliRunner

from inkwell import __version__
from inkwell.cli import cli
from inkwell.content import load_entry


class _Answer:
    def __init__(self, value):
        self.value = value

    def ask(self):
        return self.value


def _fake_prompts(monkeypatch, texts, confirm=True):
    answers = list(texts)
    monkeypatch.setattr(questionary, "text", lambda *a, **k: _Answer(answers.pop(0)))
    monkeypatch.setattr(questionary, "confirm", lambda *a, **k: _Answer(confirm))


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_build(monkeypatch, project, write_post):
    write_post(project / "content" / "blog", "hello")
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build", "--jobs", "2"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 7 routes from 1 entries (0 drafts)" in result.output
    assert (project / "dist" / "blog" / "hello" / "index.html").exists()


def test_cli_build_output_option(monkeypatch, project, tmp_path):
    monkeypatch.chdir(project)
    target = tmp_path / "elsewhere"
    result = CliRunner().invoke(cli, ["build", "--output", str(target)])
    assert result.exit_code == 0
    assert (target / "index.html").exists()
    assert not (project / "dist").exists()


def test_cli_build_failure_reports_file(monkeypatch, project, write_post):
    write_post(project / "content" / "blog", "pic", image="/images/missing.png")
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "content/blog/pic.md" in result.output
    assert "missing.png" in result.output


def test_cli_routes(monkeypatch, project, write_post):
    write_post(project / "content" / "blog", "hello")
    write_post(project / "content" / "blog", "pic", image="https://cdn.example.com/p.png")
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["routes"])
    assert result.exit_code == 0
    lines = [line.split() for line in result.output.splitlines()]
    assert ["post-page", "/blog/hello"] in lines
    assert ["post-preview-image", "/blog/hello/og.png"] in lines
    assert ["post-page", "/blog/pic"] in lines
    assert ["post-preview-image", "/blog/pic/og.png"] not in lines
    assert ["feed-document", "/rss.xml"] in lines
    assert len(lines) == 8


def test_cli_post_creates_draft(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _fake_prompts(monkeypatch, ["  A short summary  "])
    result = CliRunner().invoke(cli, ["post", "My New Post!"])
    assert result.exit_code == 0
    path = tmp_path / "content" / "blog" / "my-new-post.md"
    assert "Created content/blog/my-new-post.md" in result.output
    entry = load_entry(path)
    assert entry.title == "My New Post!"
    assert entry.description == "A short summary"
    assert entry.draft is True
    assert entry.body == "\n# My New Post!\n\n"


def test_cli_post_prompts_for_title(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _fake_prompts(monkeypatch, ["Prompted Title", "desc"], confirm=False)
    result = CliRunner().invoke(cli, ["post"])
    assert result.exit_code == 0
    entry = load_entry(tmp_path / "content" / "blog" / "prompted-title.md")
    assert entry.draft is False


def test_cli_post_refuses_existing(monkeypatch, tmp_path, write_post):
    write_post(tmp_path / "content" / "blog", "taken", suffix=".mdx")
    monkeypatch.chdir(tmp_path)
    _fake_prompts(monkeypatch, ["desc"])
    result = CliRunner().invoke(cli, ["post", "Taken"])
    assert result.exit_code != 0
    assert "File already exists" in result.output


def test_cli_post_aborts_on_cancel(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _fake_prompts(monkeypatch, [None])
    result = CliRunner().invoke(cli, ["post"])
    assert result.exit_code == 1
    assert not (tmp_path / "content").exists()


def test_main_entry_point(monkeypatch):
    from inkwell.__main__ import main

    monkeypatch.setattr(sys, "argv", ["inkwell", "--version"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 0
