"""dsplab configuration: centralized defaults and the signal catalog file."""

from pathlib import Path

CONFIG_DIR = Path(__file__).parent
CATALOG_PATH = CONFIG_DIR / "catalog.yaml"
