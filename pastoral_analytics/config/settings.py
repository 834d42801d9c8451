from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os


def _load_env(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip().lstrip("\ufeff")
        value = value.strip().strip("\"").strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    data_dir: Path
    output_dir: Path
    table_dir: Path
    fig_dir: Path
    owner_id: str
    groq_api_key: str | None
    groq_model: str
    narrative_temperature: float
    narrative_timeout_seconds: float

    @property
    def has_narrative_credential(self) -> bool:
        return bool(self.groq_api_key and self.groq_api_key.strip())


def get_settings(base_dir: Path | None = None) -> Settings:
    base_dir = base_dir or Path(__file__).resolve().parents[1]
    _load_env(base_dir / ".env")
    output_dir = Path(os.getenv("REPORT_OUTPUT_DIR", str(base_dir / "output")))
    table_dir = output_dir / "tables"
    fig_dir = output_dir / "figures"

    return Settings(
        base_dir=base_dir,
        data_dir=Path(os.getenv("REPORT_DATA_DIR", str(base_dir / "db"))),
        output_dir=output_dir,
        table_dir=table_dir,
        fig_dir=fig_dir,
        owner_id=os.getenv("REPORT_OWNER_ID", "default"),
        groq_api_key=os.getenv("GROQ_API_KEY") or None,
        groq_model=os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"),
        narrative_temperature=float(os.getenv("NARRATIVE_TEMPERATURE", "0.4")),
        narrative_timeout_seconds=float(os.getenv("NARRATIVE_TIMEOUT_SECONDS", "30")),
    )
