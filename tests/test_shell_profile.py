"""
Unit tests for the shell profile updater
"""

import pytest

from env_setup import ShellProfileUpdater
from env_setup.shell_profile import PATH_EXPORT_LINE


@pytest.fixture
def home(tmp_path):
    """Fake home directory"""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def updater(home) -> ShellProfileUpdater:
    """Updater working inside the fake home"""
    return ShellProfileUpdater(home=home)


class TestUpdate:
    """Tests for ShellProfileUpdater.update"""

    def test_creates_missing_profile(self, updater, home):
        """Test a missing .zshrc is created and populated"""
        # Act
        result = updater.update()

        # Assert
        assert result.created is True
        content = (home / ".zshrc").read_text()
        assert PATH_EXPORT_LINE in content
        assert "source ~/.bash_aliases" in content
        assert content.endswith("\n")

    def test_adds_export_when_missing(self, updater, home):
        """Test PATH export is appended"""
        # Arrange
        (home / ".zshrc").write_text("alias ll='ls -l'\nsource ~/.zsh_plugins\n")

        # Act
        result = updater.update()

        # Assert
        lines = (home / ".zshrc").read_text().splitlines()
        assert lines[0] == "alias ll='ls -l'"
        assert lines[-1] == PATH_EXPORT_LINE
        assert result.changes == ["Added PATH export"]

    def test_updates_export_without_local_bin(self, updater, home):
        """Test an existing export gets the local bin prepended"""
        # Arrange
        (home / ".zshrc").write_text(
            'export PATH="/usr/local/bin:$PATH"\nsource ~/.profile\n'
        )

        # Act
        result = updater.update()

        # Assert
        lines = (home / ".zshrc").read_text().splitlines()
        assert lines[0] == 'export PATH="$HOME/.local/bin:/usr/local/bin:$PATH"'
        assert result.changes == ["Updated PATH export"]

    def test_first_export_fixed_when_later_one_has_local_bin(self, updater, home):
        """Test the first export is rewritten and the result verifies"""
        # Arrange
        (home / ".zshrc").write_text(
            "export PATH=/opt/tools/bin:$PATH\n"
            'export PATH="$HOME/.local/bin:$PATH"\n'
            "source ~/.aliases\n"
        )

        # Act
        result = updater.update()
        report = updater.verify()

        # Assert
        lines = (home / ".zshrc").read_text().splitlines()
        assert lines[0] == 'export PATH="$HOME/.local/bin:/opt/tools/bin:$PATH"'
        assert result.changes == ["Updated PATH export"]
        assert report.ok is True

    def test_trailing_comment_kept_outside_value(self, updater, home):
        """Test an inline comment stays a comment after the rewrite"""
        # Arrange
        (home / ".zshrc").write_text(
            "export PATH=/x:$PATH  # note\nsource ~/.profile\n"
        )

        # Act
        updater.update()

        # Assert
        lines = (home / ".zshrc").read_text().splitlines()
        assert lines[0] == 'export PATH="$HOME/.local/bin:/x:$PATH"  # note'

    def test_hash_inside_quotes_is_not_a_comment(self, updater, home):
        """Test a quoted # is part of the value"""
        # Arrange
        (home / ".zshrc").write_text(
            "export PATH='/opt/a #b:$PATH'\nsource ~/.profile\n"
        )

        # Act
        updater.update()

        # Assert
        lines = (home / ".zshrc").read_text().splitlines()
        assert lines[0] == 'export PATH="$HOME/.local/bin:/opt/a #b:$PATH"'

    def test_absolute_home_path_counts_as_local_bin(self, updater, home):
        """Test an export using the absolute home path is left alone"""
        # Arrange
        original = f"export PATH={home}/.local/bin:$PATH\nsource ~/.profile\n"
        (home / ".zshrc").write_text(original)

        # Act
        result = updater.update()

        # Assert
        assert result.modified is False
        assert (home / ".zshrc").read_text() == original

    def test_second_update_is_noop(self, updater, home):
        """Test update is idempotent"""
        # Arrange
        (home / ".zshrc").write_text("export PATH=/opt/bin:$PATH\n")
        updater.update()
        first = (home / ".zshrc").read_text()

        # Act
        result = updater.update()

        # Assert
        assert result.modified is False
        assert (home / ".zshrc").read_text() == first

    def test_backup_created_before_write(self, updater, home):
        """Test the original is backed up when modified"""
        # Arrange
        (home / ".zshrc").write_text("alias gs='git status'\n")

        # Act
        result = updater.update()

        # Assert
        assert result.backup_path is not None
        assert result.backup_path.parent == home / ".zsh_backups"
        assert result.backup_path.name.startswith("zshrc_backup_")
        assert result.backup_path.read_text() == "alias gs='git status'\n"


class TestEnsureLine:
    """Tests for ShellProfileUpdater.ensure_line"""

    def test_appends_once(self, updater, home):
        """Test the line is added once with its comment"""
        # Arrange
        line = 'eval "$(/opt/homebrew/bin/brew shellenv)"'

        # Act
        first = updater.ensure_line(line, comment="Added for Homebrew")
        second = updater.ensure_line(line, comment="Added for Homebrew")

        # Assert
        assert first is True
        assert second is False
        content = (home / ".zshrc").read_text()
        assert content.count(line) == 1
        assert "# Added for Homebrew" in content


class TestVerify:
    """Tests for ShellProfileUpdater.verify"""

    def test_verified_after_update(self, updater):
        """Test an updated profile passes verification"""
        # Arrange
        updater.update()

        # Act
        report = updater.verify()

        # Assert
        assert report.ok is True
        assert report.includes_local_bin is True
        assert report.properly_quoted is True
        assert report.export_count == 1
        assert report.warnings == []

    def test_missing_profile(self, updater):
        """Test a missing profile fails verification"""
        # Act
        report = updater.verify()

        # Assert
        assert report.ok is False
        assert report.warnings

    def test_warnings_for_duplicates_quoting_and_newline(self, updater, home):
        """Test each problem produces a warning"""
        # Arrange
        (home / ".zshrc").write_text(
            "export PATH=~/.local/bin:$PATH\nexport PATH=/opt/bin:$PATH"
        )

        # Act
        report = updater.verify()

        # Assert
        assert report.ok is True
        assert report.properly_quoted is False
        assert report.export_count == 2
        assert report.ends_with_newline is False
        assert len(report.warnings) == 3

    def test_export_without_local_bin(self, updater, home):
        """Test an export missing the local bin fails"""
        # Arrange
        (home / ".zshrc").write_text('export PATH="/opt/bin:$PATH"\n')

        # Act
        report = updater.verify()

        # Assert
        assert report.ok is False
        assert report.path_export == 'export PATH="/opt/bin:$PATH"'
