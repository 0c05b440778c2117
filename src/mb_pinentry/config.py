"""Centralized application configuration."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from mb_pinentry.gnupg import default_gnupg_home, pinentry_program, tty_options

DEFAULT_DATA_DIR = Path.home() / ".local" / "mb-pinentry"
DEFAULT_BINARY_NAME = "pinentry"


class Config(BaseModel):
    """Application-wide configuration."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for config and log files")
    binary_name: str = Field(default=DEFAULT_BINARY_NAME, min_length=1, description="pinentry program to run")
    args: list[str] = Field(default_factory=list, description="Extra command-line arguments for pinentry")
    options: list[str] = Field(default_factory=list, description="OPTION arguments sent on every connection")
    timeout: int = Field(default=0, ge=0, description="Dialog timeout in seconds (0 = no timeout)")
    gnupg_home: Path = Field(default_factory=default_gnupg_home, description="GnuPG home directory")
    use_gpg_tty: bool = Field(default=True, description="Pass GPG_TTY and TERM to pinentry as tty options")

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "pinentry.log"

    @computed_field(description="gpg-agent configuration, consulted for pinentry-program")
    @property
    def gpg_agent_conf_path(self) -> Path:
        """gpg-agent configuration, consulted for pinentry-program."""
        return self.gnupg_home / "gpg-agent.conf"

    def assuan_options(self) -> list[str]:
        """Configured OPTION arguments plus tty options when enabled."""
        if not self.use_gpg_tty:
            return list(self.options)
        return [*self.options, *tty_options()]

    def with_flags(self, *, debug: bool = False, no_global_grab: bool = False) -> "Config":
        """Return a copy with pinentry's --debug and --no-global-grab flags appended to args."""
        flags = [flag for flag, enabled in (("--debug", debug), ("--no-global-grab", no_global_grab)) if enabled]
        if not flags:
            return self
        return self.model_copy(update={"args": [*self.args, *flags]})

    @staticmethod
    def build(data_dir: Path | None = None, binary_name: str | None = None) -> "Config":
        """Build a Config from defaults, config.toml, gpg-agent.conf, and an explicit binary override.

        Binary precedence: explicit argument, then config.toml, then
        pinentry-program from gpg-agent.conf, then ``pinentry``.
        """
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            if isinstance(toml_data.get("binary_name"), str):
                kwargs["binary_name"] = toml_data["binary_name"]
            for key in ("args", "options"):
                if isinstance(toml_data.get(key), list):
                    kwargs[key] = [str(v) for v in toml_data[key]]
            if isinstance(toml_data.get("timeout"), int):
                kwargs["timeout"] = toml_data["timeout"]
            if isinstance(toml_data.get("gnupg_home"), str):
                kwargs["gnupg_home"] = Path(toml_data["gnupg_home"]).expanduser()
            if isinstance(toml_data.get("use_gpg_tty"), bool):
                kwargs["use_gpg_tty"] = toml_data["use_gpg_tty"]

        if binary_name:
            kwargs["binary_name"] = binary_name
        elif "binary_name" not in kwargs:
            gnupg_home = kwargs.get("gnupg_home") or default_gnupg_home()
            program = pinentry_program(gnupg_home / "gpg-agent.conf")
            if program:
                kwargs["binary_name"] = program

        return Config(**kwargs)
