from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"

    database_url: str = "sqlite:///./restaurant_pos.db"
    sql_echo: bool = False

    log_level: str = "INFO"

    # walk-in tabs get a generated table id, e.g. "Walk-in-1718000000000"
    walk_in_prefix: str = "Walk-in-"
    walk_in_label: str = "Walk-in"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
