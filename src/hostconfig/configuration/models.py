"""
Typed settings for hostconfig's own infrastructure.

The aggregator itself treats every value as an opaque string; these models
are only used to turn a configuration section into logging settings.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class LoggingConfiguration(BaseModel):
    """Logging settings consumed by ``LoggerFactory.configure``."""

    level: str = Field(default="INFO", description="Minimum level to emit")
    format: Literal["text", "json"] = Field(default="text", description="Console output format")
    output: Literal["console", "file", "both"] = Field(default="console", description="Where records go")
    file_path: Optional[str] = Field(default=None, description="Target file when output includes 'file'")

    @field_validator('level', mode='before')
    def normalize_level(cls, v):
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator('format', 'output', mode='before')
    def lowercase_choice(cls, v):
        return str(v).lower()

    @classmethod
    def from_section(cls, section: Any) -> 'LoggingConfiguration':
        """
        Bind from a configuration section such as ``config.get_section("logging")``.

        Child keys are matched case-insensitively against the field names;
        empty values fall back to the defaults.
        """
        fields = {name.lower(): name for name in cls.model_fields}
        values: Dict[str, Any] = {}
        for child in section.get_children():
            name = fields.get(child.key.lower())
            if name is not None and child.value not in (None, ""):
                values[name] = child.value
        return cls.model_validate(values)
