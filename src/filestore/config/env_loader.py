"""Environment loader for filestore settings.

Values are merged in a fixed order, later sources winning:
``.env`` file, then the process environment, then explicit overrides
(the CLI's ``--base-dir`` ends up here).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

DEFAULT_ENV_FILE = ".env"


class EnvLoader:
    """Merge a ``.env`` file, ``os.environ`` and overrides into one mapping.

    Attributes:
        env_file: File to read; ``~`` is expanded. ``None`` means ``./.env``
            in the working directory at load time.
        loaded_file: The file actually read by the last ``load()``, or
            ``None`` when no file existed.
    """

    def __init__(self, env_file: Optional[Path | str] = None) -> None:
        self.env_file = Path(env_file).expanduser() if env_file else None
        self.loaded_file: Optional[Path] = None

    def _file_values(self) -> Dict[str, str]:
        path = self.env_file or Path.cwd() / DEFAULT_ENV_FILE
        if not path.is_file():
            self.loaded_file = None
            return {}
        self.loaded_file = path
        # keys declared without a value (``FOO`` alone) come back as None
        return {k: v for k, v in dotenv_values(path).items() if v is not None}

    def load(self, overrides: Optional[Mapping[str, object]] = None) -> Dict[str, str]:
        data = self._file_values()
        data.update(os.environ)
        if overrides:
            data.update({key: str(value) for key, value in overrides.items()})
        return data


__all__ = ["EnvLoader", "DEFAULT_ENV_FILE"]
