import tomllib
from dataclasses import dataclass
from pathlib import Path

from git_issue.core.errors import ConfigError

CONFIG_FILENAME = "config"


@dataclass(frozen=True)
class IssuesConfig:
    """In-memory representation of `.issues/config`.

    The file is created empty by `git issue init`, which means all defaults.

    Example config:
      # Match the commit layout of the shell git-issue: no merge commits,
      # generic commit subjects
      strict_compatibility = true

      # Default --format for `git issue list`
      list_format = "oneline"
    """

    strict_compatibility: bool
    list_format: str


DEFAULT_CONFIG = IssuesConfig(strict_compatibility=False, list_format="simple")


def load_config(issues_dir: Path) -> IssuesConfig:
    """Load `.issues/config` if present; otherwise return defaults."""
    cfg_path = issues_dir / CONFIG_FILENAME
    if not cfg_path.exists():
        return DEFAULT_CONFIG

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid {cfg_path}: {e}") from e

    strict = data.get("strict_compatibility", DEFAULT_CONFIG.strict_compatibility)
    if not isinstance(strict, bool):
        raise ConfigError(f"Invalid {cfg_path}: strict_compatibility must be true or false")
    list_format = str(data.get("list_format", DEFAULT_CONFIG.list_format))
    return IssuesConfig(strict_compatibility=strict, list_format=list_format)
