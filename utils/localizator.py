import json
from pathlib import Path
from typing import Optional

import config
from enums.text_entity import TextEntity


class Localizator:
    l10n_dir = Path(__file__).resolve().parent.parent / "l10n"

    @staticmethod
    def get_text(entity: TextEntity, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given entity and key.

        Args:
            entity: Entity type (USER, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "en").
                  If None, uses config.LANGUAGE (default).
                  Use this parameter in concurrent contexts (e.g., FastAPI routes)
                  to avoid global state race conditions.

        Returns:
            Localized text string
        """
        language = lang if lang is not None else config.LANGUAGE
        localization_file = Localizator.l10n_dir / f"{language}.json"

        with open(localization_file, "r", encoding="UTF-8") as f:
            data = json.loads(f.read())
            if entity == TextEntity.USER:
                return data["user"][key]
            else:
                return data["common"][key]

    @staticmethod
    def format_text(entity: TextEntity, key: str, format_args: dict | None = None, lang: Optional[str] = None) -> str:
        """Get localized text and substitute the service-provided format arguments."""
        return Localizator.get_text(entity, key, lang=lang).format(**(format_args or {}))
