# roomchat/core/config.py
import os
from typing import Literal
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - STORE_BACKEND where room history is persisted: "file" or "redis"
        - MESSAGES_DIR the directory of the file store
        - HISTORY_LIMIT how many messages a room keeps (and a joiner receives)
    """

    # Load environment variables from the .env file
    load_dotenv()

    STORE_BACKEND: Literal["file", "redis"] = os.getenv("STORE_BACKEND", "file")

    MESSAGES_DIR: str = os.getenv("MESSAGES_DIR", "messages")
    HISTORY_LIMIT: int = int(os.getenv("HISTORY_LIMIT", "1000"))

    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_ACCESS_KEY: str = os.getenv("REDIS_ACCESS_KEY", "")
    REDIS_SSL: bool = os.getenv("REDIS_SSL", "false").lower() == "true"

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def redis_url(self) -> str:
        scheme = "rediss" if self.REDIS_SSL else "redis"
        auth = f":{self.REDIS_ACCESS_KEY}@" if self.REDIS_ACCESS_KEY else ""
        return f"{scheme}://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

settings = Settings()
