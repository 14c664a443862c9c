"""Configuration model for color detection and stylesheet indexing."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

# Languages color detection activates for unless configured otherwise
DEFAULT_LANGUAGES: list[str] = [
    "css",
    "scss",
    "sass",
    "less",
    "stylus",
    "postcss",
    "html",
    "xml",
    "svg",
    "javascript",
    "javascriptreact",
    "typescript",
    "typescriptreact",
    "vue",
    "svelte",
    "astro",
    "json",
    "jsonc",
    "yaml",
    "toml",
    "markdown",
    "mdx",
    "plaintext",
    "python",
    "ruby",
    "php",
    "perl",
    "go",
    "rust",
    "java",
    "kotlin",
    "swift",
    "csharp",
    "cpp",
    "c",
    "objective-c",
    "dart",
    "lua",
    "shellscript",
    "powershell",
    "sql",
    "graphql",
]

ALL_LANGUAGES = "*"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class ColorIndexerConfig(BaseModel):
    """Validated settings for detection, indexing and refresh scheduling."""

    # Detection
    languages: list[str] = Field(default_factory=lambda: list(DEFAULT_LANGUAGES))

    # Workspace indexing
    stylesheet_patterns: list[str] = Field(default_factory=lambda: ["**/*.css"])
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["**/node_modules/**"]
    )
    max_stylesheet_files: int = Field(default=100, ge=1)

    # Refresh scheduling
    refresh_debounce_seconds: float = Field(default=0.05, ge=0)
    apply_chunk_size: int = Field(default=200, ge=1)
    apply_yield_seconds: float = Field(default=0.0, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text")

    @field_validator("languages", "stylesheet_patterns", "exclude_patterns", mode="before")
    @classmethod
    def validate_string_list(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [item.strip() for item in v.split(",") if item.strip()]
        if not isinstance(v, list):
            raise ValueError("Must be a list of strings")
        for item in v:
            if not isinstance(item, str):
                raise ValueError("All entries must be strings")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in LOG_FORMATS:
            raise ValueError(f"Log format must be one of {', '.join(LOG_FORMATS)}")
        return v

    def should_process(self, language_id: str) -> bool:
        """Whether documents of this language are scanned for colors."""
        return ALL_LANGUAGES in self.languages or language_id in self.languages
