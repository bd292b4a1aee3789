import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_FILE = Path("lifegrid.toml")


@dataclass(frozen=True)
class BoardConfig:
    rows: int = 30
    cols: int = 120
    seed: int | None = None


@dataclass(frozen=True)
class DisplayConfig:
    alive: str = "X"
    dead: str = " "
    interval_ms: int = 100
    clear: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: Path | None = None


@dataclass(frozen=True)
class Config:
    board: BoardConfig = field(default_factory=BoardConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def override(self, **values: Any) -> "Config":
        """
        Return a copy with ``section_key=value`` overrides applied.

        ``None`` values are ignored so argparse defaults can be passed
        straight through.
        """
        sections: dict[str, dict[str, Any]] = {}
        for name, value in values.items():
            if value is None:
                continue
            section, _, key = name.partition("_")
            sections.setdefault(section, {})[key] = value

        updated = self
        for section, changes in sections.items():
            updated = replace(updated, **{section: replace(getattr(updated, section), **changes)})
        updated.validate()
        return updated

    def validate(self) -> None:
        if self.board.rows < 0 or self.board.cols < 0:
            raise ValueError(f"board dimensions must be non-negative, got {self.board.rows}×{self.board.cols}")
        if len(self.display.alive) != 1 or len(self.display.dead) != 1:
            raise ValueError("display.alive and display.dead must be single characters")
        if self.display.interval_ms < 0:
            raise ValueError("display.interval_ms must be non-negative")


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration from a TOML file.

    An explicit ``path`` must exist; without one, ``lifegrid.toml`` in the
    working directory is used when present and defaults otherwise.
    """
    if path is None:
        if not DEFAULT_CONFIG_FILE.exists():
            return Config()
        path = DEFAULT_CONFIG_FILE

    with open(path, "rb") as f:
        cfg = tomllib.load(f)

    b = cfg.get("board", {})
    d = cfg.get("display", {})
    lg = cfg.get("logging", {})

    log_file = lg.get("file")
    config = Config(
        board=BoardConfig(
            rows=int(b.get("rows", BoardConfig.rows)),
            cols=int(b.get("cols", BoardConfig.cols)),
            seed=int(b["seed"]) if "seed" in b else None,
        ),
        display=DisplayConfig(
            alive=str(d.get("alive", DisplayConfig.alive)),
            dead=str(d.get("dead", DisplayConfig.dead)),
            interval_ms=int(d.get("interval_ms", DisplayConfig.interval_ms)),
            clear=bool(d.get("clear", DisplayConfig.clear)),
        ),
        logging=LoggingConfig(
            level=str(lg.get("level", LoggingConfig.level)).upper(),
            file=Path(log_file) if log_file else None,
        ),
    )
    config.validate()
    return config
