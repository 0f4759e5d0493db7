from pathlib import Path
from typing import Optional

import yaml


class ModelDefaultsMemory:
    """
    File-backed memory for the default generation model.

    The file is a tiny YAML mapping: `default_model: <name>`.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, UnicodeDecodeError):
            # Self-heal if corrupted
            self.path.write_text("{}\n", encoding="utf-8")
            return None

        if not isinstance(data, dict):
            return None
        model = data.get("default_model")
        if not isinstance(model, str):
            return None
        return model.strip() or None

    def save(self, model: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump({"default_model": model}, sort_keys=False),
            encoding="utf-8"
        )
