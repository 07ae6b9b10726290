"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use EJSHTML_ prefix (e.g., EJSHTML_COMPILE_DEBUG=false).

Settings can also be loaded from a .env file in the project root. They
provide the defaults for every compile Options not given explicitly.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use EJSHTML_ prefix.

    Examples:
        EJSHTML_COMPILE_DEBUG=false
        EJSHTML_FILENAME=views
        EJSHTML_TEMPLATE_EXTENSION=.html
    """

    model_config = SettingsConfigDict(
        env_prefix="EJSHTML_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Compile defaults
    compile_debug: bool = Field(
        default=True,
        description="Record directive line ranges and enrich render errors with a snippet",
    )

    filename: str = Field(
        default="ejs",
        description="Template name used in diagnostics when none is given",
    )

    strict_mode: bool = Field(
        default=True,
        description="Bind declared vars with locals[name] (missing keys fail) instead of locals.get(name)",
    )

    source_map: bool = Field(
        default=False,
        description="Record a position map while generating code",
    )

    # File engine configuration
    template_extension: str = Field(
        default=".ejs",
        description="Extension appended to template and custom element names without one",
    )

    def templateName_resolve(self, name: str) -> str:
        """
        Append the template extension to a name that has no suffix.

        Args:
            name: Template name or custom element tag (e.g., "my-tag")

        Returns:
            File name to look up (e.g., "my-tag.ejs")

        Example:
            >>> settings = AppSettings()
            >>> settings.templateName_resolve("my-tag")
            'my-tag.ejs'
            >>> settings.templateName_resolve("page.html")
            'page.html'
        """
        basename = name.rsplit("/", 1)[-1]
        if "." in basename:
            return name
        return f"{name}{self.template_extension}"


# Singleton instance - import this in your code
appsettings = AppSettings()
