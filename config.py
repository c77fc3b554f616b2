import os
from typing import Optional

import yaml
import keyring

from settings_schema import SettingsSchema, validate_settings

APP_VERSION = "1.0.0"
KEYRING_SERVICE = "workout-calendar"

ENV_OVERRIDES = {
    "WORKOUT_API_URL": "api_url",
    "WORKOUT_API_KEY": "api_key",
    "WORKOUT_USER_ID": "user_id",
    "WORKOUT_DB_PATH": "db_path",
}


class YamlConfig:
    """Calendar settings file.

    With ``ENCRYPT_SETTINGS=1`` the values of :attr:`SENSITIVE_KEYS` are kept in
    the OS keyring and the file only records that a secret exists.
    """

    SENSITIVE_KEYS = ("api_key",)

    def __init__(self, path: str = "settings.yaml", encrypt: Optional[bool] = None) -> None:
        self.path = path
        if encrypt is None:
            encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.encrypt = encrypt

    def _reveal(self, data: dict) -> dict:
        for key in self.SENSITIVE_KEYS:
            if key not in data:
                continue
            secret = keyring.get_password(KEYRING_SERVICE, key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def _conceal(self, data: dict) -> dict:
        for key in self.SENSITIVE_KEYS:
            if key in data:
                keyring.set_password(KEYRING_SERVICE, key, str(data[key]))
                data[key] = True
        return data

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return self._reveal(data) if self.encrypt else data

    def save(self, data: dict) -> None:
        out = {k: v for k, v in data.items() if v is not None}
        if self.encrypt:
            self._conceal(out)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)

    def update(self, **changes) -> SettingsSchema:
        """Merge ``changes`` into the file, refusing values that do not validate."""
        data = self.load()
        data.update({k: v for k, v in changes.items() if v is not None})
        settings = validate_settings(data)
        self.save(data)
        return settings


def load_settings(path: str = "settings.yaml") -> SettingsSchema:
    """Read ``path``, apply environment overrides and validate the result."""
    data = YamlConfig(path).load()
    for env_key, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value:
            data[key] = value
    return validate_settings(data)
