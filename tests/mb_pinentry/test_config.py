"""Tests for Config model validation, computed paths, and building from files."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mb_pinentry.config import DEFAULT_BINARY_NAME, Config

DATA_DIR = Path("/fake/data-dir")
GNUPG_HOME = Path("/fake/gnupg")


@pytest.fixture
def gnupg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated GnuPG home without gpg-agent.conf."""
    home = tmp_path / "gnupg"
    home.mkdir()
    monkeypatch.setenv("GNUPGHOME", str(home))
    return home


class TestConfigPaths:
    """Computed path properties."""

    def test_config_path(self):
        """Config file is data_dir / config.toml."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME)
        assert cfg.config_path == DATA_DIR / "config.toml"

    def test_log_path(self):
        """Log file is data_dir / pinentry.log."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME)
        assert cfg.log_path == DATA_DIR / "pinentry.log"

    def test_gpg_agent_conf_path(self):
        """gpg-agent.conf lives in the GnuPG home."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME)
        assert cfg.gpg_agent_conf_path == GNUPG_HOME / "gpg-agent.conf"


class TestConfigValidation:
    """Pydantic field constraints."""

    def test_defaults(self):
        """Default values for optional fields."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME)
        assert cfg.binary_name == DEFAULT_BINARY_NAME
        assert cfg.args == []
        assert cfg.options == []
        assert cfg.timeout == 0
        assert cfg.use_gpg_tty is True

    def test_negative_timeout(self):
        """timeout < 0 is rejected."""
        with pytest.raises(ValidationError):
            Config(data_dir=DATA_DIR, timeout=-1)

    def test_empty_binary_name(self):
        """An empty binary name is rejected."""
        with pytest.raises(ValidationError):
            Config(data_dir=DATA_DIR, binary_name="")


class TestAssuanOptions:
    """Options sent on every connection."""

    def test_with_tty(self, monkeypatch: pytest.MonkeyPatch):
        """Tty options follow the configured ones."""
        monkeypatch.setenv("GPG_TTY", "/dev/pts/7")
        monkeypatch.delenv("TERM", raising=False)
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME, options=["default-ok=Yes"])
        assert cfg.assuan_options() == ["default-ok=Yes", "ttyname=/dev/pts/7"]

    def test_without_tty(self, monkeypatch: pytest.MonkeyPatch):
        """Disabled tty options leave only the configured ones."""
        monkeypatch.setenv("GPG_TTY", "/dev/pts/7")
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME, options=["lc-ctype=C"], use_gpg_tty=False)
        assert cfg.assuan_options() == ["lc-ctype=C"]


class TestWithFlags:
    """pinentry command-line flags from CLI switches."""

    def test_no_flags(self):
        """Without flags the args are unchanged."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME, args=["--display", ":1"])
        assert cfg.with_flags().args == ["--display", ":1"]

    def test_flags_appended(self):
        """Flags follow the configured args, debug first."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME, args=["--display", ":1"])
        flagged = cfg.with_flags(debug=True, no_global_grab=True)
        assert flagged.args == ["--display", ":1", "--debug", "--no-global-grab"]
        assert cfg.args == ["--display", ":1"]

    def test_no_global_grab_only(self):
        """--no-global-grab alone."""
        cfg = Config(data_dir=DATA_DIR, gnupg_home=GNUPG_HOME)
        assert cfg.with_flags(no_global_grab=True).args == ["--no-global-grab"]


class TestBuild:
    """Config.build merges config.toml, gpg-agent.conf, and overrides."""

    def test_no_files(self, tmp_path: Path, gnupg_home: Path):
        """Without files the defaults apply."""
        cfg = Config.build(tmp_path)
        assert cfg.data_dir == tmp_path
        assert cfg.binary_name == DEFAULT_BINARY_NAME
        assert cfg.gnupg_home == gnupg_home

    def test_toml(self, tmp_path: Path, gnupg_home: Path):
        """Values from config.toml are used."""
        (tmp_path / "config.toml").write_text(
            'binary_name = "pinentry-tty"\nargs = ["--no-global-grab"]\noptions = ["default-ok=Yes"]\ntimeout = 60\nuse_gpg_tty = false\n'
        )
        cfg = Config.build(tmp_path)
        assert cfg.binary_name == "pinentry-tty"
        assert cfg.args == ["--no-global-grab"]
        assert cfg.options == ["default-ok=Yes"]
        assert cfg.timeout == 60
        assert cfg.use_gpg_tty is False

    def test_gpg_agent_conf(self, tmp_path: Path, gnupg_home: Path):
        """pinentry-program from gpg-agent.conf is used when config.toml has no binary."""
        (gnupg_home / "gpg-agent.conf").write_text("pinentry-program /usr/bin/pinentry-gnome3\n")
        assert Config.build(tmp_path).binary_name == "/usr/bin/pinentry-gnome3"

    def test_toml_gnupg_home(self, tmp_path: Path, gnupg_home: Path):
        """gnupg_home from config.toml decides which gpg-agent.conf is read."""
        other = tmp_path / "other-gnupg"
        other.mkdir()
        (other / "gpg-agent.conf").write_text("pinentry-program /opt/pinentry-mac\n")
        (tmp_path / "config.toml").write_text(f'gnupg_home = "{other}"\n')
        cfg = Config.build(tmp_path)
        assert cfg.gnupg_home == other
        assert cfg.binary_name == "/opt/pinentry-mac"

    def test_toml_beats_gpg_agent_conf(self, tmp_path: Path, gnupg_home: Path):
        """config.toml takes precedence over gpg-agent.conf."""
        (gnupg_home / "gpg-agent.conf").write_text("pinentry-program /usr/bin/pinentry-gnome3\n")
        (tmp_path / "config.toml").write_text('binary_name = "pinentry-tty"\n')
        assert Config.build(tmp_path).binary_name == "pinentry-tty"

    def test_explicit_override(self, tmp_path: Path, gnupg_home: Path):
        """An explicit binary beats every file."""
        (tmp_path / "config.toml").write_text('binary_name = "pinentry-tty"\n')
        assert Config.build(tmp_path, "pinentry-qt").binary_name == "pinentry-qt"

    def test_wrong_types_ignored(self, tmp_path: Path, gnupg_home: Path):
        """Values of the wrong type fall back to defaults."""
        (tmp_path / "config.toml").write_text('binary_name = 1\ntimeout = "soon"\nargs = "x"\n')
        cfg = Config.build(tmp_path)
        assert cfg.binary_name == DEFAULT_BINARY_NAME
        assert cfg.timeout == 0
        assert cfg.args == []
