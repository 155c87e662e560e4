from dataclasses import dataclass, field
from pathlib import Path
import tomllib


@dataclass(frozen=True)
class AppConfig:
    user_agent: str = "filemirror/0.1"
    log_level: str = "INFO"


@dataclass(frozen=True)
class HttpConfig:
    probe_timeout_seconds: float = 10.0
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 60.0


@dataclass(frozen=True)
class DownloadConfig:
    chunk_size: int = 256 * 1024
    sample_interval_seconds: float = 1.0
    attempts: int = 1
    retry_delay_seconds: float = 1.0


@dataclass(frozen=True)
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)


DEFAULT_CONFIG_PATH = Path("filemirror.toml")


def load_config(path: Path | None = None) -> Config:
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return Config()
        path = DEFAULT_CONFIG_PATH
    elif not path.exists():
        raise FileNotFoundError(
            f"Missing config file {path}. Copy config.example.toml and edit it."
        )

    raw = tomllib.loads(path.read_text(encoding="utf-8"))

    return Config(
        app=AppConfig(**raw.get("app", {})),
        http=HttpConfig(**raw.get("http", {})),
        download=DownloadConfig(**raw.get("download", {})),
    )
