from functools import lru_cache

from gestu_writer.config import AppConfig, load_config


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return load_config()
