import os
import stat

import pytest

from sessionstellar import hooks


@pytest.fixture
def repo(tmp_path):
    (tmp_path / ".git").mkdir()
    return str(tmp_path)


def _hook_text(repo):
    with open(hooks.hook_path(repo), encoding="utf-8") as f:
        return f.read()


def test_find_git_root_walks_up(repo):
    nested = os.path.join(repo, "a", "b")
    os.makedirs(nested)
    assert hooks.find_git_root(nested) == repo


def test_find_git_root_outside_repository(tmp_path):
    # tmp_path itself may sit inside a repository on some machines
    root = hooks.find_git_root(str(tmp_path))
    assert root is None or not root.startswith(str(tmp_path))


def test_install_creates_executable_hook(repo):
    assert hooks.install_hook(repo) == hooks.INSTALLED

    text = _hook_text(repo)
    assert text.startswith("#!/bin/sh")
    assert hooks.HOOK_MARKER in text
    assert hooks.HOOK_COMMAND in text
    assert os.stat(hooks.hook_path(repo)).st_mode & stat.S_IXUSR
    assert hooks.hook_installed(repo)


def test_install_is_idempotent(repo):
    hooks.install_hook(repo)
    assert hooks.install_hook(repo) == hooks.ALREADY_INSTALLED
    assert _hook_text(repo).count(hooks.HOOK_MARKER) == 1


def test_install_appends_to_existing_hook(repo):
    path = hooks.hook_path(repo)
    os.makedirs(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write("#!/bin/sh\necho other-tool\n")
    os.chmod(path, 0o644)

    hooks.install_hook(repo)

    text = _hook_text(repo)
    assert text.startswith("#!/bin/sh\necho other-tool\n")
    assert hooks.HOOK_MARKER in text
    assert os.stat(path).st_mode & stat.S_IXUSR


def test_install_updates_existing_gitignore(repo):
    gitignore = os.path.join(repo, ".gitignore")
    with open(gitignore, "w", encoding="utf-8") as f:
        f.write("node_modules/\n")

    hooks.install_hook(repo)
    hooks.remove_hook(repo)
    hooks.install_hook(repo)

    with open(gitignore, encoding="utf-8") as f:
        text = f.read()
    assert text.count(hooks.GITIGNORE_ENTRY) == 1


def test_install_does_not_create_gitignore(repo):
    hooks.install_hook(repo)
    assert not os.path.exists(os.path.join(repo, ".gitignore"))


def test_remove_keeps_other_content(repo):
    path = hooks.hook_path(repo)
    os.makedirs(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write("#!/bin/sh\necho other-tool\n")

    hooks.install_hook(repo)
    assert hooks.remove_hook(repo) == hooks.REMOVED

    text = _hook_text(repo)
    assert hooks.HOOK_MARKER not in text
    assert hooks.HOOK_COMMAND not in text
    assert text == "#!/bin/sh\necho other-tool\n"
    assert not hooks.hook_installed(repo)


def test_remove_keeps_trailing_newline_of_created_hook(repo):
    hooks.install_hook(repo)
    hooks.remove_hook(repo)
    assert _hook_text(repo) == "#!/bin/sh\n"


def test_remove_without_hook_file(repo):
    assert hooks.remove_hook(repo) == hooks.NO_HOOK_FILE


def test_remove_when_not_installed(repo):
    path = hooks.hook_path(repo)
    os.makedirs(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write("#!/bin/sh\n")
    assert hooks.remove_hook(repo) == hooks.NOT_INSTALLED
