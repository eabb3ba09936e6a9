from dataclasses import dataclass
from functools import lru_cache
import os


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


@dataclass(frozen=True)
class Settings:
    index_path: str
    id_field: str
    numeric_id_field: str
    body_field: str
    raw_field: str
    export_dir: str
    api_host: str
    api_port: int
    api_reload: bool


@lru_cache
def get_settings() -> Settings:
    return Settings(
        index_path=os.getenv("INDEX_PATH", "/workspace/data/index"),
        id_field=os.getenv("INDEX_ID_FIELD", "id"),
        numeric_id_field=os.getenv("INDEX_NUMERIC_ID_FIELD", "id_long"),
        body_field=os.getenv("INDEX_BODY_FIELD", "contents"),
        raw_field=os.getenv("INDEX_RAW_FIELD", "raw"),
        export_dir=os.getenv("INDEX_EXPORT_DIR", "."),
        api_host=os.getenv("INDEX_API_HOST", "0.0.0.0"),
        api_port=_to_int(os.getenv("INDEX_API_PORT"), default=8000, minimum=1),
        api_reload=_to_bool(os.getenv("INDEX_API_RELOAD"), default=False),
    )
