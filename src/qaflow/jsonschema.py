"""JSON Schema of definition files."""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema

from qaflow.schema import CommandDefinition, RunnerDefinition

if TYPE_CHECKING:
    from pydantic import BaseModel

#: Field supplied by the loader from the file location.
IDENTIFIER_FIELD = 'identifier'

#: Definition kinds with a file schema.
KINDS: dict[str, 'type[BaseModel]'] = {
    'runner': RunnerDefinition,
    'command': CommandDefinition,
}


class SchemaGenerator(GenerateJsonSchema):
    """JSON Schema generator for definition files.

    The identifier of a definition is derived from its file location
    and is therefore not part of the file schema.
    """

    @classmethod
    @cache
    def make_schema(cls, kind: str = 'runner', indent: int | str | None = 4) -> str:
        """Generate the JSON Schema of a definition file.

        Args:
            kind: Definition kind, `runner` or `command`.
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.

        Raises:
            KeyError: If the kind is unknown.
        """
        model = KINDS[kind]

        schema = model.model_json_schema(
            schema_generator=cls,
            mode='validation',
        )

        schema.get('properties', {}).pop(IDENTIFIER_FIELD, None)
        if required := [name for name in schema.get('required', []) if name != IDENTIFIER_FIELD]:
            schema['required'] = required
        else:
            schema.pop('required', None)

        schema.update({
            'title': f'qaflow {kind}',
            'description': f'JSON Schema for qaflow {kind} definition files',
            '$schema': cls.schema_dialect,
        })

        return dumps(
            schema,
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )
