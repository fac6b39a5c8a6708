import os
from dataclasses import dataclass


@dataclass
class Settings:
    NUM_WORKERS: int = 1
    LOG_LEVEL: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        num_workers = int(os.getenv("LEDGER_NUM_WORKERS", "1"))
        if num_workers < 1:
            raise ValueError(f"LEDGER_NUM_WORKERS must be at least 1, got {num_workers}")
        return cls(
            NUM_WORKERS=num_workers,
            LOG_LEVEL=os.getenv("LEDGER_LOG_LEVEL", "WARNING").upper(),
        )
