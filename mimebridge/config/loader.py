"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MimeBridgeConfig

logger = logging.getLogger(__name__)


def load_config(cli_path: str | None = None) -> MimeBridgeConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./mimebridge.yaml"),
        Path.home() / ".mimebridge" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    logger.debug("Skipping empty config file %s", path)
                    continue
                if not isinstance(raw, dict):
                    raise ValueError(f"Invalid config in {path}: expected a mapping at the top level")
                config = MimeBridgeConfig(**_expand_env_vars(raw))
                logger.debug("Loaded config from %s", path)
                return config
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    logger.debug("No config file found; using defaults")
    return MimeBridgeConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `mimebridge config init`
DEFAULT_CONFIG_TEMPLATE = """\
# mimebridge.yaml

# Routing and execution
engine:
  max_hops: 3                  # longest handler chain the pathfinder may return
  # step_timeout_seconds: 120  # unset = a step may run indefinitely

# Handlers, tried in this order when several can perform the same step
handlers:
  enabled: [raster, rename, html, svg, pdf, ffmpeg]
  raster:
    jpeg_quality: 92
    text_font_size: 48
  html:
    width: 800
    height: 600
  svg:
    dpi: 72                    # 72 renders one pixel per SVG unit
  pdf:
    dpi: 144
    # max_pages: 20
  ffmpeg:
    binary: "ffmpeg"           # or ${FFMPEG_PATH}

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
