"""Dialog texts and settings, rendered as pinentry setup directives."""

from pydantic import BaseModel, ConfigDict, Field

from mb_pinentry.assuan import protocol as p


class Dialog(BaseModel):
    """Everything pinentry shows in one dialog. Unset fields keep pinentry's defaults."""

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(default=None, description="Window title")
    description: str | None = Field(default=None, description="Descriptive text above the entry field")
    prompt: str | None = Field(default=None, description="Label in front of the entry field")
    ok: str | None = Field(default=None, description="OK button label")
    cancel: str | None = Field(default=None, description="Cancel button label")
    not_ok: str | None = Field(default=None, description="Non-affirmative button label")
    error: str | None = Field(default=None, description="Error text, e.g. after a wrong passphrase")
    key_info: str | None = Field(default=None, description="Stable key identifier for the external password cache")
    gen_pin: str | None = Field(default=None, description="Label of the generate action")
    gen_pin_tooltip: str | None = Field(default=None, description="Tooltip of the generate action")
    quality_bar: bool = Field(default=False, description="Show the passphrase quality bar")
    quality_bar_tooltip: str | None = Field(default=None, description="Tooltip of the quality bar")
    repeat: str | None = Field(default=None, description="Ask for the passphrase twice, with this label")
    repeat_error: str | None = Field(default=None, description="Shown when the repeated entry does not match")
    repeat_ok: str | None = Field(default=None, description="Shown when the repeated entry matches")
    timeout: int = Field(default=0, ge=0, description="Dialog timeout in seconds (0 = no timeout)")
    options: list[str] = Field(default_factory=list, description="OPTION arguments, e.g. 'ttyname=/dev/pts/1'")

    def commands(self) -> list[str]:
        """Render the dialog as escaped directive lines in a stable order."""
        texts = [
            (p.SETTITLE, self.title),
            (p.SETDESC, self.description),
            (p.SETPROMPT, self.prompt),
            (p.SETOK, self.ok),
            (p.SETCANCEL, self.cancel),
            (p.SETNOTOK, self.not_ok),
            (p.SETERROR, self.error),
            (p.SETKEYINFO, self.key_info),
            (p.SETGENPIN, self.gen_pin),
            (p.SETGENPIN_TT, self.gen_pin_tooltip),
            (p.SETQUALITYBAR_TT, self.quality_bar_tooltip),
            (p.SETREPEAT, self.repeat),
            (p.SETREPEATERROR, self.repeat_error),
            (p.SETREPEATOK, self.repeat_ok),
        ]
        commands = [f"{p.OPTION} {p.escape(o)}" for o in self.options]
        commands.extend(f"{directive} {p.escape(text)}" for directive, text in texts if text is not None)
        if self.quality_bar:
            commands.append(p.SETQUALITYBAR)
        if self.timeout > 0:
            commands.append(f"{p.SETTIMEOUT} {self.timeout}")
        return commands
