import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Sequence

import jsonschema

from character_creation.errors import MissingCorpusFieldError

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"


def require_fields(node: Any, required: Iterable[str], where: str) -> Mapping[str, Any]:
    required = list(required)
    if not isinstance(node, Mapping):
        raise MissingCorpusFieldError(where, required)
    missing = [field for field in required if field not in node]
    if missing:
        raise MissingCorpusFieldError(where, missing)
    return node


def require_path(root: Any, path: Sequence[str], where: str) -> Any:
    """Walk nested mappings by key, naming the first missing key on failure."""
    node = root
    walked = []
    for key in path:
        walked.append(key)
        if not isinstance(node, Mapping) or key not in node:
            raise MissingCorpusFieldError(where, [".".join(walked)])
        node = node[key]
    return node


@lru_cache(maxsize=None)
def _load_schema(schema_path: Path) -> Dict[str, Any]:
    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def validate_final_character(character: Dict[str, Any], schemas_dir: Path = SCHEMAS_DIR) -> Dict[str, Any]:
    schema = _load_schema(schemas_dir / "character.schema.json")
    jsonschema.validate(character, schema)
    return character


def validate_dark_dawn_character(character: Dict[str, Any], schemas_dir: Path = SCHEMAS_DIR) -> Dict[str, Any]:
    schema = _load_schema(schemas_dir / "darkdawn_character.schema.json")
    jsonschema.validate(character, schema)
    return character
