from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DICEWORK_", extra="ignore"
    )

    environment: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    # Parser limits. Counts and sides outside these ranges are syntax errors.
    max_dice_count: int = 100
    max_dice_sides: int = 10_000
    # Bounds recursion so hostile input can't overflow the stack.
    max_parse_depth: int = 200

    # Reroll counts accepted by DiceRoll, in both directions (-3..3 by default).
    max_rerolls: int = 3


settings = Settings()
