"""
Git post-commit hook management.

The hook is a marker-delimited block appended to ``.git/hooks/post-commit``
so that it coexists with hooks installed by other tools.
"""

import logging
import os
import stat
from typing import Optional

logger = logging.getLogger(__name__)

HOOK_MARKER = "# sessionstellar-hook"
HOOK_COMMAND = "sessionstellar score-recent 2>/dev/null || true"
GITIGNORE_ENTRY = ".sessionstellar/"

INSTALLED = "installed"
ALREADY_INSTALLED = "already_installed"
REMOVED = "removed"
NO_HOOK_FILE = "no_hook_file"
NOT_INSTALLED = "not_installed"


def find_git_root(start: Optional[str] = None) -> Optional[str]:
    """
    Walk up from a directory to the nearest one containing ``.git``.

    Args:
        start: Directory to start from (default: current working directory)

    Returns:
        Repository root, or None outside a git repository
    """
    current = os.path.abspath(start or os.getcwd())
    while True:
        if os.path.exists(os.path.join(current, '.git')):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def hook_path(git_root: str) -> str:
    return os.path.join(git_root, '.git', 'hooks', 'post-commit')


def hook_installed(git_root: str) -> bool:
    path = hook_path(git_root)
    if not os.path.exists(path):
        return False
    with open(path, 'r', encoding='utf-8') as f:
        return HOOK_MARKER in f.read()


def install_hook(git_root: str) -> str:
    """
    Install the post-commit hook and gitignore the local score directory.

    Args:
        git_root: Repository root

    Returns:
        INSTALLED, or ALREADY_INSTALLED when the marker is present
    """
    path = hook_path(git_root)
    block = f"\n{HOOK_MARKER}\n{HOOK_COMMAND}\n"

    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            existing = f.read()
        if HOOK_MARKER in existing:
            return ALREADY_INSTALLED
        with open(path, 'a', encoding='utf-8') as f:
            f.write(block)
    else:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(f"#!/bin/sh{block}")
        os.chmod(path, 0o755)

    # Hooks copied in by hand may lack the executable bit
    mode = os.stat(path).st_mode
    if not mode & stat.S_IXUSR:
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    _ignore_scores_dir(git_root)
    logger.info(f"Installed post-commit hook at {path}")
    return INSTALLED


def _ignore_scores_dir(git_root: str):
    """Add the score directory to an existing .gitignore."""
    gitignore = os.path.join(git_root, '.gitignore')
    if not os.path.exists(gitignore):
        return
    with open(gitignore, 'r', encoding='utf-8') as f:
        if '.sessionstellar' in f.read():
            return
    with open(gitignore, 'a', encoding='utf-8') as f:
        f.write(f"\n# sessionstellar local scores\n{GITIGNORE_ENTRY}\n")


def remove_hook(git_root: str) -> str:
    """
    Remove the hook block, leaving the rest of the hook file intact.

    The block runs from the marker line up to and including the next blank line.

    Args:
        git_root: Repository root

    Returns:
        REMOVED, NO_HOOK_FILE or NOT_INSTALLED
    """
    path = hook_path(git_root)
    if not os.path.exists(path):
        return NO_HOOK_FILE

    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    if HOOK_MARKER not in content:
        return NOT_INSTALLED

    kept = []
    skipping = False
    for line in content.split('\n'):
        if line == HOOK_MARKER:
            skipping = True
        elif skipping and not line.strip():
            skipping = False
        elif not skipping:
            kept.append(line)

    with open(path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(kept).rstrip('\n') + '\n')

    logger.info(f"Removed post-commit hook block from {path}")
    return REMOVED
