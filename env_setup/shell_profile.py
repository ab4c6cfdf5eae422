"""
Shell profile (~/.zshrc) maintenance.

Makes sure the profile exports a PATH that includes ~/.local/bin and sources
the user's aliases and ~/.profile, backing the file up before any change.
"""

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)


EXPORT_PATH_PATTERN = re.compile(r"^export PATH=(?P<value>.*)$")
SOURCE_PATTERN = re.compile(r"^source\s+.*")

LOCAL_BIN = "$HOME/.local/bin"
PATH_EXPORT_LINE = f'export PATH="{LOCAL_BIN}:$PATH"'
PATH_EXPORT_COMMENT = "# Set PATH to include user's local bin if it exists"

SOURCE_BLOCK = [
    "",
    "# Source additional configurations",
    "if [ -f ~/.bash_aliases ]; then",
    "    source ~/.bash_aliases",
    "fi",
    "",
    "if [ -f ~/.profile ]; then",
    "    source ~/.profile",
    "fi",
]


@dataclass
class ProfileUpdate:
    """Changes made to the profile by one update run"""
    changes: List[str] = field(default_factory=list)
    created: bool = False
    backup_path: Optional[Path] = None

    @property
    def modified(self) -> bool:
        return bool(self.changes)


@dataclass
class VerificationReport:
    """
    Result of checking the profile's PATH configuration.

    Attributes:
        path_export: First `export PATH=` line, if any
        includes_local_bin: Whether that line mentions the local bin directory
        properly_quoted: Whether the value is quoted around $PATH
        export_count: Number of `export PATH=` lines
        readable: Profile is readable by the current user
        writable: Profile is writable by the current user
        ends_with_newline: File ends with a newline
        warnings: Human-readable problems found
    """
    path_export: Optional[str] = None
    includes_local_bin: bool = False
    properly_quoted: bool = False
    export_count: int = 0
    readable: bool = False
    writable: bool = False
    ends_with_newline: bool = True
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.path_export is not None and self.includes_local_bin


class ShellProfileUpdater:
    """
    Keeps a zsh profile's PATH and source configuration in shape.

    Example:
        updater = ShellProfileUpdater()
        result = updater.update()
        report = updater.verify()
    """

    def __init__(
        self,
        profile_path: Optional[Path] = None,
        backup_dir: Optional[Path] = None,
        home: Optional[Path] = None
    ):
        """
        Initialize updater.

        Args:
            profile_path: Profile to edit (defaults to ~/.zshrc)
            backup_dir: Where backups go (defaults to ~/.zsh_backups)
            home: Home directory used for path matching (defaults to ~)
        """
        self.home = Path(home) if home else Path.home()
        self.profile_path = Path(profile_path) if profile_path else self.home / ".zshrc"
        self.backup_dir = Path(backup_dir) if backup_dir else self.home / ".zsh_backups"

    def ensure_exists(self) -> bool:
        """
        Create an empty profile if it is missing.

        Returns:
            True if the file was created
        """
        if self.profile_path.exists():
            return False
        logger.warning(f"{self.profile_path} not found, creating a new one")
        self.profile_path.parent.mkdir(parents=True, exist_ok=True)
        self.profile_path.touch()
        return True

    def backup(self) -> Optional[Path]:
        """
        Copy the profile into the backup directory.

        Returns:
            Backup path, or None if there was nothing to back up
        """
        if not self.profile_path.exists():
            return None
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.backup_dir / f"zshrc_backup_{timestamp}"
        shutil.copy2(self.profile_path, backup_path)
        logger.info(f"Created backup at: {backup_path}")
        return backup_path

    def read_lines(self) -> List[str]:
        return self.profile_path.read_text(encoding="utf-8").splitlines()

    def write_lines(self, lines: List[str]) -> None:
        self.profile_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def has_local_bin(self, line: str) -> bool:
        """Whether a PATH line already mentions the user's local bin directory"""
        markers = (LOCAL_BIN, "${HOME}/.local/bin", "~/.local/bin", f"{self.home}/.local/bin")
        return any(marker in line for marker in markers)

    def update(self) -> ProfileUpdate:
        """
        Add or fix the PATH export and source commands.

        Returns:
            ProfileUpdate describing what changed
        """
        result = ProfileUpdate(created=self.ensure_exists())
        if result.created:
            result.changes.append(f"Created new {self.profile_path.name} file")

        lines = self.read_lines()
        edited = False

        export_indexes = [
            i for i, line in enumerate(lines)
            if EXPORT_PATH_PATTERN.match(line.strip())
        ]
        if not export_indexes:
            logger.info(f"Adding PATH export to {self.profile_path}")
            lines += ["", PATH_EXPORT_COMMENT, PATH_EXPORT_LINE]
            result.changes.append("Added PATH export")
            edited = True
        elif not self.has_local_bin(lines[export_indexes[0]]):
            index = export_indexes[0]
            logger.info(f"Updating PATH export on line {index + 1}")
            lines[index] = self._prepend_local_bin(lines[index])
            result.changes.append("Updated PATH export")
            edited = True

        if not any(SOURCE_PATTERN.match(line.strip()) for line in lines):
            logger.info(f"Adding common source commands to {self.profile_path}")
            lines += SOURCE_BLOCK
            result.changes.append("Added common source commands")
            edited = True

        if edited:
            result.backup_path = self.backup()
            self.write_lines(lines)
        else:
            logger.info(f"No changes needed, {self.profile_path} is already configured")

        return result

    def ensure_line(self, line: str, comment: Optional[str] = None) -> bool:
        """
        Append a line to the profile if it is not already present.

        Args:
            line: Exact line to add
            comment: Optional comment placed above it

        Returns:
            True if the profile was changed
        """
        self.ensure_exists()
        lines = self.read_lines()
        if any(existing.strip() == line.strip() for existing in lines):
            return False

        self.backup()
        lines.append("")
        if comment:
            lines.append(f"# {comment}")
        lines.append(line)
        self.write_lines(lines)
        logger.info(f"Added to {self.profile_path}: {line}")
        return True

    def verify(self) -> VerificationReport:
        """
        Check the profile's PATH export.

        Returns:
            VerificationReport
        """
        report = VerificationReport()
        if not self.profile_path.exists():
            report.warnings.append(f"{self.profile_path} does not exist")
            return report

        content = self.profile_path.read_text(encoding="utf-8")
        lines = content.splitlines()
        exports = [line.strip() for line in lines if line.strip().startswith("export PATH=")]

        report.export_count = len(exports)
        report.readable = os.access(self.profile_path, os.R_OK)
        report.writable = os.access(self.profile_path, os.W_OK)
        report.ends_with_newline = not content or content.endswith("\n")

        if exports:
            report.path_export = exports[0]
            report.includes_local_bin = self.has_local_bin(exports[0])
            report.properly_quoted = (
                ('"' in exports[0] and "$PATH" in exports[0])
                or ("'$" in exports[0] and "PATH'" in exports[0])
            )

        if not report.path_export:
            report.warnings.append("No PATH export found")
        elif not report.includes_local_bin:
            report.warnings.append("PATH export does not include the user's local bin directory")
        elif not report.properly_quoted:
            report.warnings.append(
                f'PATH export might not be properly quoted. Consider using: "{LOCAL_BIN}:$PATH"'
            )
        if report.export_count > 1:
            report.warnings.append(
                f"Found {report.export_count} PATH exports. There should be only one."
            )
        if not report.readable:
            report.warnings.append(f"Cannot read {self.profile_path}")
        elif not report.writable:
            report.warnings.append(f"Cannot write to {self.profile_path}")
        if not report.ends_with_newline:
            report.warnings.append(
                f"{self.profile_path.name} does not end with a newline. "
                "Some shells might have issues."
            )

        for warning in report.warnings:
            logger.warning(warning)
        return report

    def _prepend_local_bin(self, line: str) -> str:
        match = EXPORT_PATH_PATTERN.match(line.strip())
        value = match.group("value").strip() if match else "$PATH"
        value, comment = _split_comment(value)
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        line = f'export PATH="{LOCAL_BIN}:{value}"'
        return f"{line}  {comment}" if comment else line


def _split_comment(value: str) -> Tuple[str, str]:
    """
    Separate a trailing shell comment from an assignment value.

    A `#` only starts a comment outside quotes and after whitespace.

    Returns:
        (value, comment) with comment empty when there is none
    """
    quote = None
    for i, char in enumerate(value):
        if quote:
            if char == quote:
                quote = None
        elif char in {"'", '"'}:
            quote = char
        elif char == "#" and i > 0 and value[i - 1].isspace():
            return value[:i].rstrip(), value[i:]
    return value, ""
