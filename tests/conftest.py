from __future__ import annotations

import os
import shutil
import subprocess

import pytest

from blame_heatmap import config as config_module

SHA_OLD = "a" * 40
SHA_NEW = "b" * 40


def porcelain_block(sha: str, orig: int, final: int, *, time: int | None = None,
                    content: str = "x", group: int | None = 1) -> str:
    """One ``git blame -p`` entry; full commit headers only when *time* is given."""
    header = f"{sha} {orig} {final}" + (f" {group}" if group else "")
    lines = [header]
    if time is not None:
        lines += [
            "author Someone",
            "author-mail <someone@example.com>",
            f"author-time {time - 7}",
            "author-tz +0000",
            "committer Someone",
            "committer-mail <someone@example.com>",
            f"committer-time {time}",
            "committer-tz +0000",
            "summary change",
            "filename example.py",
        ]
    lines.append(f"\t{content}")
    return "\n".join(lines)


def porcelain(*blocks: str) -> str:
    return "\n".join(blocks) + "\n"


class FakeDocument:
    def __init__(self, path: str, line_count: int):
        self.path = path
        self.line_count = line_count


class FakeView:
    def __init__(self, document: FakeDocument):
        self.document = document
        self.applied: dict = {}
        self.calls: list = []

    def set_decorations(self, style, ranges) -> None:
        self.calls.append((style, list(ranges)))
        if ranges:
            self.applied[style] = list(ranges)
        else:
            self.applied.pop(style, None)

    def rendered(self) -> dict[int, list[tuple[int, int]]]:
        """Applied ranges keyed by style level, for comparisons across rebuilds."""
        return {style.index: ranges for style, ranges in self.applied.items()}


class FakeHost:
    def __init__(self, *views: FakeView):
        self.views = list(views)
        self.active = self.views[0] if self.views else None
        self.errors: list[str] = []

    def active_view(self):
        return self.active

    def visible_views(self):
        return list(self.views)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


class FakeProvider:
    """Attribution provider returning canned transcripts by path."""

    def __init__(self, transcripts: dict[str, str | None]):
        self.transcripts = transcripts
        self.calls: list[str] = []

    def __call__(self, path: str) -> str | None:
        self.calls.append(path)
        return self.transcripts.get(path)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point global config at a temp dir and drop BLAME_HEATMAP_* env vars."""
    global_dir = tmp_path / "home" / ".blame-heatmap"
    monkeypatch.setattr(config_module, "GLOBAL_CONFIG_DIR", global_dir)
    monkeypatch.setattr(config_module, "GLOBAL_CONFIG_FILE", global_dir / "config.json")
    monkeypatch.setattr(config_module, "GLOBAL_DOTENV_FILE", global_dir / ".env")
    for env_var in config_module.ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("BLAME_HEATMAP_DEBUG", raising=False)
    return global_dir


class GitRepo:
    """Throwaway repository with pinned identity and commit dates."""

    IDENTITY = [
        "-c", "user.name=Test", "-c", "user.email=test@example.com",
        "-c", "commit.gpgsign=false",
    ]

    def __init__(self, root):
        self.root = root
        self.git("init", "-q")

    def git(self, *args: str, when: str | None = None) -> None:
        env = None
        if when:
            env = dict(os.environ, GIT_AUTHOR_DATE=when, GIT_COMMITTER_DATE=when)
        subprocess.run(["git", *self.IDENTITY, *args], cwd=self.root, check=True,
                       capture_output=True, env=env)

    def commit(self, name: str, content: bytes, when: str):
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        self.git("add", "--", name)
        self.git("commit", "-q", "-m", f"update {name}", when=when)
        return path


@pytest.fixture
def git_repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepo(root)
