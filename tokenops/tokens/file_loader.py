"""
Token definition file loading.
"""

import json
import logging
from pathlib import Path
from typing import Union

from ..core.errors import InvalidParameters
from .schema import TokenFileDefinition, validate_params

logger = logging.getLogger(__name__)


def resolve_definition_path(name_or_path: str, input_dir: Union[str, Path]) -> Path:
    """
    token.<name>.json inside input_dir, or name_or_path itself when it
    already names a .json file.
    """
    if name_or_path.endswith(".json"):
        return Path(name_or_path).expanduser()
    return Path(input_dir) / f"token.{name_or_path}.json"


def load_token_definition(name_or_path: str, input_dir: Union[str, Path]) -> TokenFileDefinition:
    """
    Read and validate a token definition file.

    Raises:
        InvalidParameters: If the file is missing, not JSON, or fails validation
    """
    path = resolve_definition_path(name_or_path, input_dir)
    logger.debug(f"Reading token file from: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as ex:
        raise InvalidParameters(f"Token file not found: {path}") from ex
    except OSError as ex:
        raise InvalidParameters(f"Cannot read token file {path}: {ex}") from ex
    except UnicodeDecodeError as ex:
        raise InvalidParameters(f"Token file {path} is not valid UTF-8: {ex}") from ex
    except json.JSONDecodeError as ex:
        raise InvalidParameters(f"Token file {path} is not valid JSON: {ex}") from ex

    if not isinstance(raw, dict):
        raise InvalidParameters(f"Token file {path} must contain a JSON object")
    try:
        return validate_params(TokenFileDefinition, raw)
    except InvalidParameters as ex:
        raise InvalidParameters(f"Invalid token definition file {path.name}: {ex}") from ex
