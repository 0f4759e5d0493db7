from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


def load_env(root: Path | None = None) -> bool:
    """
    Load .env into the process environment.

    Looks for <root>/.env first, then the ".env/.env" folder pattern.
    Variables already set in the environment win over .env values.
    Returns True when a file was loaded.
    """
    base = root or Path(".")

    for candidate in (base / ".env", base / ".env" / ".env"):
        if candidate.is_file():
            load_dotenv(dotenv_path=candidate, override=False)
            return True
    return False
