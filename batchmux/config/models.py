from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

def normalize_extension(ext: str) -> str:
    ext = ext.strip()
    if not ext or ext == ".":
        raise ValueError("extension must not be empty")
    return ext if ext.startswith(".") else f".{ext}"

class GeneralConfig(BaseModel):
    # CLI overrides are assigned after loading; keep them validated too.
    model_config = ConfigDict(validate_assignment=True)

    workers: int = Field(default=1)
    recursive: bool = False
    source_extension: str = ".mkv"
    target_extension: str = ".mp4"
    verbose: bool = False
    log_path: Optional[str] = None
    debug: bool = False

    @field_validator("workers")
    @classmethod
    def clamp_workers(cls, v: int) -> int:
        return max(1, v)

    @field_validator("source_extension", "target_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        return normalize_extension(v)

    @model_validator(mode="after")
    def validate_extensions_differ(self):
        if self.source_extension == self.target_extension:
            raise ValueError("source_extension and target_extension must differ")
        return self

class FFmpegConfig(BaseModel):
    binary: str = "ffmpeg"
    overwrite: bool = False  # -y instead of -n
    extra_args: List[str] = Field(default_factory=list)

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)
