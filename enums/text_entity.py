from enum import Enum


class TextEntity(Enum):
    USER = 1
    COMMON = 2
