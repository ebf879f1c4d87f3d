from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import pytest

from src.core.errors import MissingArgumentError, TemplateInstallError
from src.lib.settings import INSTALL_PREFIX_ENV
from src.services.template_installer import (
    DO_NOT_INSTALL_CHOICE,
    OTHER_CHOICE,
    copy_tree,
    install_templates,
    plan_install,
    prompt_for_install_root,
    resolve_install_root,
)


@dataclass
class FakePrompter:
    choice: str | None = None
    answer: str = ""
    picks: list[tuple[str, list[str], int]] = field(default_factory=list)
    asks: list[tuple[str, str]] = field(default_factory=list)

    def pick(self, question: str, options: Sequence[str], default: int = 1) -> str:
        self.picks.append((question, list(options), default))
        return self.choice if self.choice is not None else options[default - 1]

    def ask(self, question: str, default: str) -> str:
        self.asks.append((question, default))
        return self.answer


class ExplodingPrompter:
    def pick(self, question: str, options: Sequence[str], default: int = 1) -> str:
        raise AssertionError("prompted unexpectedly")

    def ask(self, question: str, default: str) -> str:
        raise AssertionError("prompted unexpectedly")


def _relative_files(root: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_menu_lists_default_alternates_other_and_decline() -> None:
    prompter = FakePrompter()

    root = prompt_for_install_root(prompter, platform="linux")

    assert root == "/usr/local/webapp/templates"
    (question, options, default), = prompter.picks
    assert default == 1
    assert options[0] == "/usr/local/webapp/templates"
    assert options[-2:] == [OTHER_CHOICE, DO_NOT_INSTALL_CHOICE]
    assert len(options) == 14
    assert prompter.asks == []


def test_other_choice_asks_with_default_root() -> None:
    prompter = FakePrompter(choice=OTHER_CHOICE, answer="/srv/webapp/templates")

    root = prompt_for_install_root(prompter, platform="win32")

    assert root == "/srv/webapp/templates"
    assert prompter.asks == [("Template installation location:", "C:/Program Files/Webapp/templates")]


def test_do_not_install_choice_returns_none() -> None:
    assert prompt_for_install_root(FakePrompter(choice=DO_NOT_INSTALL_CHOICE)) is None


def test_explicit_prefix_beats_environment() -> None:
    root = resolve_install_root(
        prefix="/explicit",
        environ={INSTALL_PREFIX_ENV: "/from-env"},
        prompter=ExplodingPrompter(),
    )

    assert root == "/explicit"


def test_environment_override_skips_prompt() -> None:
    root = resolve_install_root(environ={INSTALL_PREFIX_ENV: "/from-env"}, prompter=ExplodingPrompter())

    assert root == "/from-env"


def test_empty_environment_value_falls_through_to_prompt() -> None:
    prompter = FakePrompter(choice="/usr/lib/webapp/templates")

    root = resolve_install_root(environ={INSTALL_PREFIX_ENV: ""}, prompter=prompter, platform="linux")

    assert root == "/usr/lib/webapp/templates"
    assert len(prompter.picks) == 1


def test_plan_install_composes_destination(tmp_path: Path) -> None:
    plan = plan_install(tmp_path, "webapp.plugin.foo", "set1/extra")

    assert plan.destination == tmp_path / "webapp" / "plugin" / "foo" / "set1" / "extra"
    assert plan.subpath == ("set1", "extra")
    assert str(plan.package_path) == "webapp/plugin/foo"


def test_plan_install_without_subpath(tmp_path: Path) -> None:
    assert plan_install(tmp_path, "webapp.plugin.foo").destination == tmp_path / "webapp" / "plugin" / "foo"


def test_install_with_environment_override_copies_everything(
    tmp_path: Path, template_source: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target_root = tmp_path / "installed"
    monkeypatch.setenv(INSTALL_PREFIX_ENV, str(target_root))

    result = install_templates("webapp.plugin.foo", template_source, "set1", prompter=ExplodingPrompter())

    destination = target_root / "webapp" / "plugin" / "foo" / "set1"
    assert result is not None
    assert result.destination == destination
    assert result.files_copied == 3
    assert _relative_files(destination) == _relative_files(template_source)


def test_install_into_existing_destination_overwrites_files(tmp_path: Path, template_source: Path) -> None:
    destination = tmp_path / "webapp" / "plugin" / "foo"
    destination.mkdir(parents=True)
    (destination / "frontpage").write_text("stale")

    result = install_templates("webapp.plugin.foo", template_source, prefix=tmp_path)

    assert result is not None
    assert (destination / "frontpage").read_bytes() == (template_source / "frontpage").read_bytes()


def test_missing_package_fails_before_prompting(tmp_path: Path) -> None:
    with pytest.raises(MissingArgumentError):
        install_templates(None, tmp_path / "does-not-exist", prompter=ExplodingPrompter())

    with pytest.raises(MissingArgumentError):
        install_templates("", tmp_path / "does-not-exist", prompter=ExplodingPrompter())


def test_declining_installs_nothing(tmp_path: Path, template_source: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    prompter = FakePrompter(choice=DO_NOT_INSTALL_CHOICE)

    assert install_templates("webapp.plugin.foo", template_source, prompter=prompter) is None
    assert list(tmp_path.iterdir()) == []


def test_empty_interactive_path_installs_nothing(
    tmp_path: Path, template_source: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    prompter = FakePrompter(choice=OTHER_CHOICE, answer="   ")

    assert install_templates("webapp.plugin.foo", template_source, prompter=prompter) is None
    assert len(prompter.asks) == 1
    assert list(tmp_path.iterdir()) == []


def test_missing_source_directory_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(TemplateInstallError) as excinfo:
        install_templates("webapp.plugin.foo", "", prefix=tmp_path)

    assert "nothing copied" in str(excinfo.value)


def test_os_error_reports_nothing_copied(tmp_path: Path, template_source: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")

    with pytest.raises(TemplateInstallError) as excinfo:
        install_templates("webapp.plugin.foo", template_source, prefix=blocker)

    assert str(excinfo.value).startswith("nothing copied: ")
    assert isinstance(excinfo.value.__cause__, OSError)


def test_partial_copy_keeps_already_copied_files(
    tmp_path: Path, template_source: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_copy2 = shutil.copy2
    calls = {"count": 0}

    def flaky_copy2(src, dst, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise PermissionError(13, "Permission denied", str(dst))
        return real_copy2(src, dst, *args, **kwargs)

    monkeypatch.setattr("src.services.template_installer.shutil.copy2", flaky_copy2)
    destination = tmp_path / "out"

    with pytest.raises(TemplateInstallError) as excinfo:
        copy_tree(template_source, destination)

    assert "copy stopped after 1 file(s)" in str(excinfo.value)
    assert "Permission denied" in str(excinfo.value)
    assert len([p for p in destination.rglob("*") if p.is_file()]) == 1


needs_symlinks = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")


@needs_symlinks
def test_linked_template_directory_is_copied(tmp_path: Path, template_source: Path) -> None:
    source = tmp_path / "source"
    shutil.copytree(template_source, source)
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "header").write_text("<h1>Beer</h1>")
    (source / "shared").symlink_to(shared, target_is_directory=True)

    result = copy_tree(source, tmp_path / "out")

    assert result.files_copied == 4
    assert (tmp_path / "out" / "shared" / "header").read_text() == "<h1>Beer</h1>"
    assert not (tmp_path / "out" / "shared").is_symlink()


@needs_symlinks
def test_symlink_loop_stops_the_copy(tmp_path: Path, template_source: Path) -> None:
    source = tmp_path / "source"
    shutil.copytree(template_source, source)
    (source / "custom" / "back").symlink_to(source, target_is_directory=True)

    with pytest.raises(TemplateInstallError) as excinfo:
        copy_tree(source, tmp_path / "out")

    assert str(excinfo.value).startswith("copy stopped after 2 file(s): symlink loop at ")
