from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from omoconf.resources import contracts_schemas_dir

AGENT_ENTRY = "agent_entry.schema.json"
CATEGORY_ENTRY = "category_entry.schema.json"
AGENT_CONFIG = "agent_config.schema.json"
PROVIDER_CONFIG = "provider_config.schema.json"


@dataclass(frozen=True)
class SchemaRef:
    name: str
    path: Path
    schema: Dict[str, Any]


class ContractStore:
    """
    Loads `omoconf/contracts/schemas/*.json` and provides validation helpers.

    Notes:
    - Cross-schema $ref values are absolute and resolved through a
      `referencing.Registry` keyed by each schema's $id.
    - Error strings are prefixed with the JSON path of the offending value.
    """

    def __init__(self, schemas_dir: Path):
        self._schemas_dir = schemas_dir
        self._schemas: Dict[str, SchemaRef] = {}
        self._registry: Registry = Registry()

    @property
    def schemas_dir(self) -> Path:
        return self._schemas_dir

    def load(self) -> None:
        if not self._schemas_dir.exists():
            raise FileNotFoundError(str(self._schemas_dir))

        resources: List[Tuple[str, Resource]] = []
        for p in sorted(self._schemas_dir.glob("*.json")):
            schema = json.loads(p.read_text(encoding="utf-8"))
            self._schemas[p.name] = SchemaRef(name=p.name, path=p, schema=schema)
            schema_id = schema.get("$id")
            if isinstance(schema_id, str) and schema_id:
                resources.append((schema_id, Resource.from_contents(schema, default_specification=DRAFT202012)))
        self._registry = Registry().with_resources(resources)

    def list_schema_names(self) -> List[str]:
        return sorted(self._schemas.keys())

    def _get(self, schema_name: str) -> SchemaRef:
        ref = self._schemas.get(schema_name)
        if ref is None:
            raise KeyError(schema_name)
        return ref

    def check_schemas(self) -> List[Tuple[str, str]]:
        """
        Returns a list of (schema_name, error_message) for invalid schemas.
        """
        errors: List[Tuple[str, str]] = []
        for name in self.list_schema_names():
            try:
                jsonschema.Draft202012Validator.check_schema(self._get(name).schema)
            except jsonschema.SchemaError as e:
                errors.append((name, e.message))
        return errors

    def validate(self, schema_name: str, instance: Any) -> List[str]:
        """
        Validates an instance and returns a list of error strings (empty means valid).
        """
        ref = self._get(schema_name)
        validator = jsonschema.Draft202012Validator(ref.schema, registry=self._registry)
        out: List[str] = []
        for e in sorted(validator.iter_errors(instance), key=lambda err: (list(map(str, err.absolute_path)), err.message)):
            path = ".".join(str(p) for p in e.absolute_path)
            out.append(f"{path}: {e.message}" if path else e.message)
        return out


_DEFAULT: Optional[ContractStore] = None


def default_contracts() -> ContractStore:
    global _DEFAULT
    if _DEFAULT is None:
        store = ContractStore(contracts_schemas_dir())
        store.load()
        _DEFAULT = store
    return _DEFAULT
