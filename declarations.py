"""
Declaration model for a deployment: resources, data lookups and outputs.

Declarations are plain values. One declaration refers to another through
interpolations such as ``${aws_iam_role.lambda_exec.arn}`` embedded in its
attribute values; ``Reference`` objects produce those strings, so references
survive f-strings and JSON policy documents alike.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from logger_config import get_logger
from utils.exceptions import DuplicateDeclarationError, UnresolvedReferenceError

logger = get_logger(__name__)

NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_-]*$')
# `$${` is the escape for a literal `${`; it is matched first so it is skipped
INTERPOLATION_PATTERN = re.compile(r'\$\$\{|\$\{([^}]*)\}')
DATA_PREFIX = 'data'


@dataclass(frozen=True)
class Reference:
    """An attribute of another declaration, e.g. ``aws_lambda_function.app.arn``."""

    address: str
    attribute: Optional[str] = None

    @property
    def expression(self) -> str:
        if self.attribute:
            return f'{self.address}.{self.attribute}'
        return self.address

    @property
    def is_data(self) -> bool:
        return self.address.startswith(DATA_PREFIX + '.')

    @property
    def type(self) -> str:
        parts = self.address.split('.')
        return parts[1] if self.is_data else parts[0]

    @property
    def name(self) -> str:
        return self.address.split('.')[-1]

    def __str__(self) -> str:
        return '${' + self.expression + '}'


def parse_expression(expression: str) -> Reference:
    """
    Parse the inside of an interpolation into a Reference.

    Args:
        expression: Text between ``${`` and ``}``

    Returns:
        Reference to the addressed declaration

    Raises:
        UnresolvedReferenceError: If the expression is not an address
    """
    parts = expression.strip().split('.')
    width = 3 if parts[0] == DATA_PREFIX else 2
    if len(parts) < width or not all(NAME_PATTERN.match(p) for p in parts[:width]):
        raise UnresolvedReferenceError(
            f'Malformed reference "${{{expression}}}"', target=expression
        )
    address = '.'.join(parts[:width])
    attribute = '.'.join(parts[width:]) or None
    return Reference(address, attribute)


def interpolations(text: str) -> List[str]:
    """Expressions inside the ``${...}`` interpolations of a string."""
    return [
        m.group(1) for m in INTERPOLATION_PATTERN.finditer(text)
        if m.group(1) is not None
    ]


def find_references(
    value: Any,
    strict: bool = True,
    on_error: Optional[Callable[[UnresolvedReferenceError], None]] = None
) -> List[Reference]:
    """
    Collect every reference held by an attribute value.

    Strings are scanned for interpolations; dicts, lists and tuples are
    walked recursively.

    Args:
        value: Attribute value
        strict: Raise on malformed interpolations instead of skipping them
        on_error: Called with each malformed-reference error instead of
            raising; takes precedence over strict

    Raises:
        UnresolvedReferenceError: If an interpolation is malformed
    """
    if isinstance(value, Reference):
        return [value]
    if isinstance(value, str):
        found = []
        for expression in interpolations(value):
            try:
                found.append(parse_expression(expression))
            except UnresolvedReferenceError as e:
                if on_error is not None:
                    on_error(e)
                elif strict:
                    raise
        return found
    if isinstance(value, dict):
        items = value.values()
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    found = []
    for item in items:
        found.extend(find_references(item, strict, on_error))
    return found


@dataclass
class Resource:
    """A managed resource declaration."""

    type: str
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)

    @property
    def address(self) -> str:
        return f'{self.type}.{self.name}'

    def ref(self, attribute: Optional[str] = None) -> Reference:
        return Reference(self.address, attribute)

    def references(self, strict: bool = True) -> List[Reference]:
        return find_references(self.attributes, strict)


@dataclass
class DataSource:
    """A read-only lookup resolved by the engine, e.g. the current region."""

    type: str
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)

    @property
    def address(self) -> str:
        return f'{DATA_PREFIX}.{self.type}.{self.name}'

    def ref(self, attribute: Optional[str] = None) -> Reference:
        return Reference(self.address, attribute)

    def references(self, strict: bool = True) -> List[Reference]:
        return find_references(self.attributes, strict)


@dataclass
class Output:
    """A named value surfaced after the deployment is materialized."""

    name: str
    value: Any
    description: Optional[str] = None
    sensitive: bool = False

    def references(self, strict: bool = True) -> List[Reference]:
        return find_references(self.value, strict)


Node = Union[Resource, DataSource]


def _address_of(target: Union[str, Node]) -> str:
    return target if isinstance(target, str) else target.address


class Configuration:
    """An ordered collection of declarations forming one deployment."""

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self._outputs: Dict[str, Output] = {}

    def _register(self, node: Node) -> Node:
        if not NAME_PATTERN.match(node.type) or not NAME_PATTERN.match(node.name):
            raise ValueError(f'Invalid declaration address "{node.address}"')
        if node.address in self._nodes:
            raise DuplicateDeclarationError(
                f'Declaration "{node.address}" already exists', node.address
            )
        self._nodes[node.address] = node
        logger.debug(f'Declared {node.address}')
        return node

    def add_resource(
        self,
        type: str,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        depends_on: Optional[List[Union[str, Node]]] = None
    ) -> Resource:
        """
        Declare a managed resource.

        Args:
            type: Resource type, e.g. ``aws_lambda_function``
            name: Logical name, unique per type
            attributes: Literal or referenced attribute values
            depends_on: Explicit ordering hints (nodes or addresses)

        Returns:
            The declared resource

        Raises:
            DuplicateDeclarationError: If the address is already declared
        """
        resource = Resource(
            type, name, dict(attributes or {}),
            [_address_of(d) for d in depends_on or []]
        )
        return self._register(resource)

    def add_data(
        self,
        type: str,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        depends_on: Optional[List[Union[str, Node]]] = None
    ) -> DataSource:
        """Declare a data lookup, optionally ordered after other declarations."""
        return self._register(DataSource(
            type, name, dict(attributes or {}),
            [_address_of(d) for d in depends_on or []]
        ))

    def add_output(
        self,
        name: str,
        value: Any,
        description: Optional[str] = None,
        sensitive: bool = False
    ) -> Output:
        """Declare a named output."""
        if not NAME_PATTERN.match(name):
            raise ValueError(f'Invalid output name "{name}"')
        if name in self._outputs:
            raise DuplicateDeclarationError(
                f'Output "{name}" already exists', f'output.{name}'
            )
        output = Output(name, value, description, sensitive)
        self._outputs[name] = output
        return output

    def get(self, address: str) -> Optional[Node]:
        return self._nodes.get(address)

    def resource(self, type: str, name: str) -> Resource:
        node = self._nodes.get(f'{type}.{name}')
        if node is None:
            raise KeyError(f'{type}.{name}')
        return node

    def data(self, type: str, name: str) -> DataSource:
        node = self._nodes.get(f'{DATA_PREFIX}.{type}.{name}')
        if node is None:
            raise KeyError(f'{DATA_PREFIX}.{type}.{name}')
        return node

    def nodes(self) -> Iterator[Node]:
        """Data sources first, then resources, each in declaration order."""
        for node in self._nodes.values():
            if isinstance(node, DataSource):
                yield node
        for node in self._nodes.values():
            if isinstance(node, Resource):
                yield node

    def resources(self) -> List[Resource]:
        return [n for n in self._nodes.values() if isinstance(n, Resource)]

    def data_sources(self) -> List[DataSource]:
        return [n for n in self._nodes.values() if isinstance(n, DataSource)]

    @property
    def outputs(self) -> List[Output]:
        return list(self._outputs.values())

    def __contains__(self, address: str) -> bool:
        return address in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
