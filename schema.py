"""
Per-type contract for the resource and data types a deployment uses.

A schema lists the attributes the provisioning engine requires, the
attributes it computes after creation (and which may therefore be referenced
without being declared) and the attributes holding JSON policy documents.
"""
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Tuple


@dataclass(frozen=True)
class ResourceSchema:
    type: str
    required: Tuple[str, ...] = ()
    # At least one attribute of each group must be set
    one_of: Tuple[Tuple[str, ...], ...] = ()
    exported: FrozenSet[str] = frozenset()
    policy_attributes: Tuple[str, ...] = ()

    def is_known_attribute(self, name: str, declared: Dict[str, Any]) -> bool:
        return name == 'id' or name in declared or name in self.exported

    def missing_attributes(self, declared: Dict[str, Any]) -> List[str]:
        """
        Return a message for each requirement the declared attributes miss.

        Args:
            declared: Attribute values of one declaration

        Returns:
            Human readable descriptions, empty when all requirements hold
        """
        missing = [
            f'missing required attribute "{name}"'
            for name in self.required
            if _is_empty(declared.get(name))
        ]
        for group in self.one_of:
            if all(_is_empty(declared.get(name)) for name in group):
                missing.append(
                    'one of {} must be set'.format(', '.join(f'"{n}"' for n in group))
                )
        missing.extend(_conditional_requirements(self.type, declared))
        return missing


def _is_empty(value: Any) -> bool:
    return value is None or value == '' or value == [] or value == {}


def _conditional_requirements(type: str, declared: Dict[str, Any]) -> List[str]:
    if type == 'aws_api_gateway_integration' and declared.get('type') in ('AWS', 'AWS_PROXY'):
        return [
            f'missing attribute "{name}" required for {declared["type"]} integrations'
            for name in ('integration_http_method', 'uri')
            if _is_empty(declared.get(name))
        ]
    return []


RESOURCE_SCHEMAS: Dict[str, ResourceSchema] = {s.type: s for s in [
    ResourceSchema(
        'aws_lambda_function',
        required=('function_name', 'role', 'handler', 'runtime'),
        one_of=(('filename', 's3_bucket', 'image_uri'),),
        exported=frozenset({
            'arn', 'invoke_arn', 'qualified_arn', 'qualified_invoke_arn',
            'version', 'last_modified', 'source_code_size',
        }),
    ),
    ResourceSchema(
        'aws_iam_role',
        required=('assume_role_policy',),
        exported=frozenset({'arn', 'name', 'unique_id', 'create_date'}),
        policy_attributes=('assume_role_policy',),
    ),
    ResourceSchema(
        'aws_iam_policy',
        required=('policy',),
        exported=frozenset({'arn', 'name', 'policy_id', 'attachment_count'}),
        policy_attributes=('policy',),
    ),
    ResourceSchema(
        'aws_iam_role_policy_attachment',
        required=('role', 'policy_arn'),
    ),
    ResourceSchema(
        'aws_cloudwatch_log_group',
        required=('name',),
        exported=frozenset({'arn'}),
    ),
    ResourceSchema(
        'aws_api_gateway_rest_api',
        required=('name',),
        exported=frozenset({
            'arn', 'execution_arn', 'root_resource_id', 'created_date',
        }),
    ),
    ResourceSchema(
        'aws_api_gateway_resource',
        required=('rest_api_id', 'parent_id', 'path_part'),
        exported=frozenset({'path'}),
    ),
    ResourceSchema(
        'aws_api_gateway_method',
        required=('rest_api_id', 'resource_id', 'http_method', 'authorization'),
    ),
    ResourceSchema(
        'aws_api_gateway_integration',
        required=('rest_api_id', 'resource_id', 'http_method', 'type'),
    ),
    ResourceSchema(
        'aws_api_gateway_deployment',
        required=('rest_api_id',),
        exported=frozenset({'invoke_url', 'execution_arn', 'created_date'}),
    ),
    ResourceSchema(
        'aws_lambda_permission',
        required=('action', 'function_name', 'principal'),
    ),
]}

DATA_SCHEMAS: Dict[str, ResourceSchema] = {s.type: s for s in [
    ResourceSchema(
        'aws_region',
        exported=frozenset({'name', 'endpoint', 'description'}),
    ),
]}


def schema_for(type: str, data: bool = False) -> ResourceSchema:
    """
    Look up the schema for a type.

    Unknown types get an empty schema exporting only ``id``.
    """
    registry = DATA_SCHEMAS if data else RESOURCE_SCHEMAS
    return registry.get(type) or ResourceSchema(type)
