from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class PathsSettings(BaseModel):
    """Path configuration.

    All paths are relative to the 'site_root' unless absolute.
    site_root defaults to current working directory.
    """

    site_root: Path = Field(
        default_factory=Path.cwd,
        description="Root directory of the site (defaults to current working directory)",
    )

    # Input
    posts_dir: Path = Field(default=Path("input/posts"), description="Post sources directory")
    statics_dir: Path = Field(default=Path("input/statics"), description="Static assets directory")
    styles_dir: Path = Field(default=Path("input/styles"), description="XSL stylesheets directory")

    # Output
    output_dir: Path = Field(default=Path("output"), description="Output root directory")
    xml_dir_name: str = Field(default="xml", description="Name of the canonical XML output directory")

    # State
    lock_file: Path = Field(default=Path("lock.xml"), description="Identifier registry file")

    @property
    def abs_posts_dir(self) -> Path:
        return self._resolve(self.posts_dir)

    @property
    def abs_statics_dir(self) -> Path:
        return self._resolve(self.statics_dir)

    @property
    def abs_styles_dir(self) -> Path:
        return self._resolve(self.styles_dir)

    @property
    def abs_output_dir(self) -> Path:
        return self._resolve(self.output_dir)

    @property
    def abs_xml_dir(self) -> Path:
        return self.abs_output_dir / self.xml_dir_name

    @property
    def abs_lock_file(self) -> Path:
        return self._resolve(self.lock_file)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path

    @model_validator(mode="after")
    def _output_is_disposable(self) -> "PathsSettings":
        """The build empties the output directory, so it must not hold the site or its inputs."""
        output = self.abs_output_dir.resolve()
        if output == self.site_root.resolve():
            msg = f"output_dir {self.output_dir} resolves to the site root"
            raise ValueError(msg)
        for name in ("posts_dir", "statics_dir", "styles_dir"):
            source = self._resolve(getattr(self, name)).resolve()
            if source == output or source.is_relative_to(output):
                msg = f"output_dir {self.output_dir} contains {name} {getattr(self, name)}"
                raise ValueError(msg)
        return self


class BuildSettings(BaseModel):
    """Settings for page generation."""

    site_title: str = Field(default="փետուր", description="Title of the home index page")
    ignore_marker: str = Field(default="~", description="Post files starting with this are skipped")
    page_name: str = Field(default="index.xml", description="File name of every generated page")


class ToolSettings(BaseModel):
    """External tool candidates, tried in order."""

    markdown: list[str] = Field(default_factory=lambda: ["pandoc"], description="Markdown to HTML converters")
    xslt: list[str] = Field(
        default_factory=lambda: ["xsltproc", "msxsl.exe"], description="XSLT processors"
    )


class PlumeConfig(BaseSettings):
    """Root configuration for Plume.

    Supports environment variable overrides with the pattern:
    PLUME_SECTION__KEY (e.g., PLUME_BUILD__SITE_TITLE). Environment
    variables win over values passed in, so a config file loaded by
    :class:`~plume.core.config_loader.ConfigLoader` can be overridden per run.
    """

    paths: PathsSettings = Field(default_factory=PathsSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="PLUME_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings
