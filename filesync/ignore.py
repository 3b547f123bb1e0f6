"""Gitignore-style ignore rules for the local directory walk.

Rules come from two places:

* patterns given on the command line (``--ignore``), which apply to the
  whole tree, and
* ignore files (``.syncignore`` and ``.gitignore``) found while walking,
  whose rules apply only to the directory holding the file and below.

Within the combined rule list the last matching rule wins, so a negated
pattern (``!keep.log``) can re-include something an earlier rule excluded.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".syncignore"
"""Ignore file owned by filesync (never synced itself)"""

IGNORE_FILE_NAMES = (IGNORE_FILE_NAME, ".gitignore")
"""Ignore files whose rules are honoured, in load order"""


def glob_to_regex(pattern: str) -> str:
    """Translate a gitignore glob into a regular expression.

    ``*`` and ``?`` never cross a ``/``; ``**`` matches any number of
    directories.

    Examples:
        >>> re.fullmatch(glob_to_regex("*.log"), "debug.log") is not None
        True
        >>> re.fullmatch(glob_to_regex("docs/**/*.md"), "docs/a/b/x.md") is not None
        True
    """
    i = 0
    out = []
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


@dataclass
class IgnoreRule:
    """A single parsed ignore pattern."""

    pattern: str
    """Pattern as written (without negation or trailing slash)"""

    base: str = ""
    """Directory (relative, forward slashes) the rule is scoped to"""

    negated: bool = False
    """True for ``!pattern`` rules that re-include paths"""

    dir_only: bool = False
    """True if the pattern ended with ``/`` and matches directories only"""

    anchored: bool = False
    """True if the pattern contains a slash and matches from ``base``"""

    _regex: re.Pattern = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._regex = re.compile(glob_to_regex(self.pattern))

    @classmethod
    def parse(cls, line: str, base: str = "") -> Optional["IgnoreRule"]:
        """Parse one line of an ignore file.

        Args:
            line: Raw line
            base: Directory the rule is scoped to

        Returns:
            IgnoreRule, or None for blank lines and comments
        """
        text = line.rstrip("\n").rstrip()
        if not text or text.startswith("#"):
            return None

        negated = False
        if text.startswith("!"):
            negated = True
            text = text[1:]
        elif text.startswith("\\"):
            # Escaped leading "!" or "#"
            text = text[1:]

        dir_only = text.endswith("/")
        text = text.rstrip("/")
        anchored = "/" in text
        text = text.lstrip("/")
        if not text:
            return None

        return cls(
            pattern=text,
            base=base,
            negated=negated,
            dir_only=dir_only,
            anchored=anchored,
        )

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check whether this rule matches a path relative to the scan root."""
        if self.dir_only and not is_dir:
            return False

        if self.base:
            prefix = self.base + "/"
            if not relative_path.startswith(prefix):
                return False
            relative_path = relative_path[len(prefix) :]

        if self.anchored:
            return self._regex.fullmatch(relative_path) is not None

        name = relative_path.rsplit("/", 1)[-1]
        return self._regex.fullmatch(name) is not None


class IgnoreFileManager:
    """Collects ignore rules for one directory walk."""

    def __init__(self, base_path: Path):
        """Initialize ignore file manager.

        Args:
            base_path: Root directory of the walk
        """
        self.base_path = base_path
        self.rules: list[IgnoreRule] = []

    def load_cli_patterns(self, patterns: list[str]) -> None:
        """Add patterns that apply to the whole tree."""
        for pattern in patterns:
            rule = IgnoreRule.parse(pattern)
            if rule is not None:
                self.rules.append(rule)

    def load_from_directory(self, directory: Path) -> int:
        """Load the ignore files found directly inside ``directory``.

        Args:
            directory: Directory being walked

        Returns:
            Number of rules added
        """
        base = directory.relative_to(self.base_path).as_posix()
        if base == ".":
            base = ""

        added = 0
        for name in IGNORE_FILE_NAMES:
            ignore_file = directory / name
            if not ignore_file.is_file():
                continue
            try:
                lines = ignore_file.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read ignore file {ignore_file}: {e}")
                continue
            rules = [IgnoreRule.parse(line, base=base) for line in lines]
            rules = [rule for rule in rules if rule is not None]
            self.rules.extend(rules)
            added += len(rules)
            logger.debug(f"Loaded {len(rules)} ignore rule(s) from {ignore_file}")
        return added

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check a path against all rules; the last matching rule decides."""
        ignored = False
        for rule in self.rules:
            if rule.matches(relative_path, is_dir=is_dir):
                ignored = not rule.negated
        return ignored


def load_ignore_file(path: Path, base: str = "") -> list[IgnoreRule]:
    """Parse an ignore file into rules scoped to ``base``."""
    rules = []
    for line in path.read_text(encoding="utf-8").splitlines():
        rule = IgnoreRule.parse(line, base=base)
        if rule is not None:
            rules.append(rule)
    return rules
