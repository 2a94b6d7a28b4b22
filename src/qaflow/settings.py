"""Process-level settings.

Settings are read from `QAFLOW_*` environment variables and may be
overridden by command-line options.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from qaflow.models import SettingsModel

#: Plugins enabled when none are configured.
DEFAULT_PLUGINS = ('echo', 'empty')


class RuntimeSettings(SettingsModel):
    """Settings of the command-line runtime."""

    model_config = SettingsConfigDict(
        env_prefix='QAFLOW_',
    )

    root: Path = Field(
        default=Path('.'),
        title='Definitions root',
        description='Directory containing runner, command and property definitions.',
    )

    plugins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLUGINS),
        title='Plugins',
        description='Names of the plugins to enable.',
    )

    skip: bool = Field(
        default=False,
        title='Continue on failure',
        description='Continue runners on failed tests.',
    )

    verbosity: int = Field(
        default=0,
        ge=0,
        title='Verbosity',
        description='Output detail level.',
    )
