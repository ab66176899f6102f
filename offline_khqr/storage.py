# Single-file key/value settings store

import json
import logging
import os

log = logging.getLogger(__name__)


class KeyValueStore:
    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial=None):
        self.values = dict(initial or {})

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value):
        self.values[key] = value
        return True


class JsonSettingsStore(KeyValueStore):
    """Settings kept as one JSON object in a file.

    Unreadable or corrupt files behave like an empty store; a corrupt file is
    moved aside to ``<path>.broken`` so the next write starts clean.
    """

    def __init__(self, path):
        self.path = os.fspath(path)

    def _load(self):
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = f.read().strip()
            if not data:
                return {}
            settings = json.loads(data)
        except ValueError:
            log.warning("Settings file %s is corrupt, moving it aside", self.path)
            try:
                os.replace(self.path, self.path + ".broken")
            except OSError as e:
                log.warning("Could not back up %s: %s", self.path, e)
            return {}
        except OSError as e:
            log.warning("Could not read settings file %s: %s", self.path, e)
            return {}

        return settings if isinstance(settings, dict) else {}

    def get(self, key):
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key, value):
        settings = self._load()
        settings[key] = value

        tmp = self.path + ".tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            log.exception("Could not write settings file %s", self.path)
            try:
                os.remove(tmp)
            except OSError:
                pass
            return False
        return True
