"""
Structural validation of a configuration.

These are the checks a provisioning engine performs before planning: every
reference resolves to a declaration of the referenced type and name, the
referenced attribute exists, required attributes are present, embedded
policy documents are well formed and the dependency graph is acyclic.
"""
import json
from dataclasses import dataclass
from typing import Any, List, Optional

from declarations import Configuration, DataSource, Reference, find_references
from graph import DependencyGraph
from logger_config import get_logger
from schema import schema_for
from utils.exceptions import ConfigurationInvalidError, UnresolvedReferenceError

logger = get_logger(__name__)

VALID_EFFECTS = {'Allow', 'Deny'}


@dataclass(frozen=True)
class Problem:
    """One validation failure, tied to the declaration it was found on."""

    address: str
    message: str

    def __str__(self) -> str:
        return f'{self.address}: {self.message}'


def _collect_references(address: str, value: Any, problems: List[Problem]) -> List[Reference]:
    def record(error: UnresolvedReferenceError) -> None:
        problems.append(Problem(address, error.message))

    return find_references(value, on_error=record)


def _check_reference(
    configuration: Configuration,
    address: str,
    reference: Reference
) -> Optional[Problem]:
    target = configuration.get(reference.address)
    if target is None:
        kind = 'data source' if reference.is_data else 'resource'
        return Problem(
            address,
            f'reference to undeclared {kind} "{reference.address}"'
        )
    if reference.attribute is None:
        return None
    # Only the first segment names the attribute; the rest indexes into it
    attribute = reference.attribute.split('.')[0].split('[')[0]
    schema = schema_for(target.type, data=isinstance(target, DataSource))
    if not schema.is_known_attribute(attribute, target.attributes):
        return Problem(
            address,
            f'"{reference.address}" has no attribute "{attribute}"'
        )
    return None


def check_policy_document(document: Any) -> List[str]:
    """
    Check an IAM policy document given as embedded JSON text.

    Args:
        document: The attribute value, expected to be a JSON string

    Returns:
        Descriptions of what is wrong, empty for a well formed document
    """
    if not isinstance(document, str):
        return ['policy document must be JSON text']
    try:
        parsed = json.loads(document)
    except json.JSONDecodeError as e:
        return [f'policy document is not valid JSON: {e.msg}']
    if not isinstance(parsed, dict):
        return ['policy document must be a JSON object']

    errors = []
    if 'Version' not in parsed:
        errors.append('policy document has no "Version"')
    statements = parsed.get('Statement')
    if isinstance(statements, dict):
        statements = [statements]
    if not statements or not isinstance(statements, list):
        errors.append('policy document has no "Statement"')
        return errors
    for index, statement in enumerate(statements):
        if not isinstance(statement, dict):
            errors.append(f'statement {index} is not an object')
            continue
        if statement.get('Effect') not in VALID_EFFECTS:
            errors.append(f'statement {index} has no valid "Effect"')
        if 'Action' not in statement and 'NotAction' not in statement:
            errors.append(f'statement {index} has no "Action"')
    return errors


def validate(configuration: Configuration) -> List[Problem]:
    """
    Validate a configuration.

    Args:
        configuration: The declarations to check

    Returns:
        Every problem found; an empty list means the configuration is valid
    """
    problems: List[Problem] = []

    for node in configuration.nodes():
        for reference in _collect_references(node.address, node.attributes, problems):
            problem = _check_reference(configuration, node.address, reference)
            if problem:
                problems.append(problem)

        for dependency in node.depends_on:
            if dependency not in configuration:
                problems.append(Problem(
                    node.address,
                    f'depends_on names undeclared "{dependency}"'
                ))

        schema = schema_for(node.type, data=isinstance(node, DataSource))
        for message in schema.missing_attributes(node.attributes):
            problems.append(Problem(node.address, message))
        for name in schema.policy_attributes:
            if name in node.attributes:
                for message in check_policy_document(node.attributes[name]):
                    problems.append(Problem(node.address, f'{name}: {message}'))

    for output in configuration.outputs:
        address = f'output.{output.name}'
        for reference in _collect_references(address, output.value, problems):
            problem = _check_reference(configuration, address, reference)
            if problem:
                problems.append(problem)

    cycle = DependencyGraph.from_configuration(configuration).find_cycle()
    if cycle:
        problems.append(Problem(
            cycle[0], 'dependency cycle: {}'.format(' -> '.join(cycle))
        ))

    if problems:
        logger.warning(f'Validation found {len(problems)} problem(s)')
    else:
        logger.info(f'Validated {len(configuration)} declarations')
    return problems


def ensure_valid(configuration: Configuration) -> None:
    """
    Validate a configuration and raise if anything is wrong.

    Raises:
        ConfigurationInvalidError: Carrying every problem found
    """
    problems = validate(configuration)
    if problems:
        raise ConfigurationInvalidError(
            'Configuration is invalid:\n' + '\n'.join(f'  {p}' for p in problems),
            problems
        )
