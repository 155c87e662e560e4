from pathlib import Path

import typer
from rich.console import Console

from filemirror.cache.entry import CacheEntry
from filemirror.config import Config, load_config
from filemirror.download.progress import ProgressSample
from filemirror.errors import DirectoryCreateError, DownloadError
from filemirror.util.logging import init_logging

app = typer.Typer(add_completion=False)
console = Console()


def _setup(config: Path | None) -> Config:
    cfg = load_config(config)
    init_logging(cfg.app.log_level)
    return cfg


def _open_entry(
    cfg: Config,
    file_name: str,
    url: str,
    base_dir: Path,
    quiet: bool = True,
) -> CacheEntry:
    def _print_progress(sample: ProgressSample) -> None:
        console.print(f"  {sample.describe()}")

    try:
        return CacheEntry(
            file_name,
            url,
            base_dir,
            cfg=cfg,
            on_progress=None if quiet else _print_progress,
        )
    except DirectoryCreateError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc


def _fmt(value) -> str:
    return value.isoformat() if value is not None else "unknown"


@app.command()
def get(
    file_name: str,
    url: str,
    base_dir: Path,
    config: Path | None = None,
    quiet: bool = False,
) -> None:
    """Print the path of the current copy, downloading it first if it changed."""
    cfg = _setup(config)
    entry = _open_entry(cfg, file_name, url, base_dir, quiet=quiet)
    try:
        result = entry.get()
    except DownloadError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc

    if result.stale:
        console.print("[yellow]Refresh failed; serving the previously downloaded copy.[/yellow]")
    elif not quiet:
        state = "downloaded" if result.refreshed else "up to date"
        console.print(f"{file_name}: {state} ({result.size_bytes} bytes)")
    console.print(str(result.path), soft_wrap=True)


@app.command()
def status(
    file_name: str,
    url: str,
    base_dir: Path,
    config: Path | None = None,
) -> None:
    """Compare the recorded timestamp with the server's without downloading."""
    cfg = _setup(config)
    entry = _open_entry(cfg, file_name, url, base_dir)
    report = entry.status()
    console.print(f"artifact: {entry.artifact_path} (exists={report.artifact_exists})")
    console.print(f"local last-modified:  {_fmt(report.local_last_modified)}")
    console.print(f"remote last-modified: {_fmt(report.remote_last_modified)}")
    console.print(f"needs refresh: {report.needs_refresh}")


@app.command()
def invalidate(
    file_name: str,
    url: str,
    base_dir: Path,
    config: Path | None = None,
) -> None:
    """Forget the recorded timestamp so the next get downloads again."""
    cfg = _setup(config)
    entry = _open_entry(cfg, file_name, url, base_dir)
    entry.invalidate()
    console.print(f"Removed {entry.metadata_path}")


if __name__ == "__main__":
    app()
