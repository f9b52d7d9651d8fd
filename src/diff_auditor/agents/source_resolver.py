"""DiffSource Resolver: staged-first diff text plus the reconciled file list."""

import logging
import subprocess
from pathlib import Path

from diff_auditor.agents.exceptions import SourceUnavailableError
from diff_auditor.models import ChangeSet

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 60

# Unquoted UTF-8 paths, no matter the user's core.quotepath.
GIT_CONFIG = ["-c", "core.quotepath=off"]
# Headers must read `diff --git a/... b/...` whatever diff.* settings are in effect.
DIFF_OPTIONS = ["--no-color", "--no-ext-diff", "--src-prefix=a/", "--dst-prefix=b/"]


class SourceResolver:
    """Reads diffs and changed-file names from git.

    Every failure degrades to empty values: an empty ChangeSet is a valid
    audit-with-zero-files state, not an error.
    """

    def __init__(self, git_binary: str = "git", timeout_seconds: int = GIT_TIMEOUT_SECONDS) -> None:
        self.git_binary = git_binary
        self.timeout_seconds = timeout_seconds

    def resolve(self, working_dir: str | Path) -> ChangeSet:
        """Collect the diff and changed paths for the repository at working_dir.

        Returns:
            ChangeSet whose diff_text is the staged diff when it is non-blank,
            otherwise the unstaged diff, and whose files are the sorted union
            of staged and unstaged names.
        """
        cwd = str(working_dir)
        repo_root = self._query(["rev-parse", "--show-toplevel"], cwd).strip() or None
        staged_diff = self._query(["diff", "--cached", *DIFF_OPTIONS], cwd)
        unstaged_diff = self._query(["diff", *DIFF_OPTIONS], cwd)
        staged_files = self._query(["diff", "--cached", "--name-only", "-z"], cwd)
        unstaged_files = self._query(["diff", "--name-only", "-z"], cwd)

        if staged_diff.strip():
            logger.info("Using staged diff (%d chars)", len(staged_diff))
            diff_text = staged_diff
        else:
            logger.info("No staged changes; using unstaged diff (%d chars)", len(unstaged_diff))
            diff_text = unstaged_diff

        files = merge_file_lists(staged_files, unstaged_files)
        logger.info("Changed files in repository: %d", len(files))

        return ChangeSet(
            staged_diff=staged_diff,
            unstaged_diff=unstaged_diff,
            diff_text=diff_text,
            files=files,
            repo_root=repo_root,
        )

    def _query(self, args: list[str], cwd: str) -> str:
        try:
            return self._run_git(args, cwd)
        except SourceUnavailableError as exc:
            logger.warning("git %s unavailable: %s", " ".join(args), exc)
            return ""

    def _run_git(self, args: list[str], cwd: str) -> str:
        try:
            result = subprocess.run(
                [self.git_binary, *GIT_CONFIG, *args],
                cwd=cwd,
                capture_output=True,
                check=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise SourceUnavailableError(f"git executable not found: {self.git_binary}") from exc
        except NotADirectoryError as exc:
            raise SourceUnavailableError(f"Not a directory: {cwd}") from exc
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else ""
            raise SourceUnavailableError(stderr or f"git exited with {exc.returncode}") from exc
        except subprocess.TimeoutExpired as exc:
            raise SourceUnavailableError(f"git timed out after {self.timeout_seconds}s") from exc
        return result.stdout.decode("utf-8", errors="replace")


def merge_file_lists(*name_lists: str) -> list[str]:
    """Union of NUL-separated (`--name-only -z`) name lists, deduplicated and sorted."""
    names: set[str] = set()
    for name_list in name_lists:
        names.update(name for name in name_list.split("\0") if name)
    return sorted(names)
