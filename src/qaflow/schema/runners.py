"""Runner and command definitions."""

from pydantic import Field

from qaflow.identifiers import Identifier  # noqa: TC001
from qaflow.models import DescribedMixin, SchemaModel
from qaflow.names import Name  # noqa: TC001
from qaflow.values import RuntimeValue  # noqa: TC001

from .steps import Step  # noqa: TC001


class RunnerDefinition(DescribedMixin, SchemaModel):
    """Named, ordered sequence of steps.

    Steps are executed strictly in declaration order.
    """

    identifier: Identifier = Field(
        title='Runner identifier',
        description='Qualified `group.name` identifier of the runner.',
    )

    steps: list[Step] = Field(
        default_factory=list,
        title='Steps',
        description='Steps of the runner in execution order.',
    )


class CommandDefinition(DescribedMixin, SchemaModel):
    """Named, reusable plugin invocation."""

    identifier: Identifier = Field(
        title='Command identifier',
        description='Qualified `group.name` identifier of the command.',
    )

    plugin: Name = Field(
        title='Plugin',
        description='Name of the registered plugin command to invoke.',
    )

    props: dict[str, RuntimeValue] = Field(
        default_factory=dict,
        title='Command properties',
        description='Properties merged over the plugin defaults.',
    )
