from enum import Enum


class KeyValueBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"
