"""
Renders a Configuration in Terraform's JSON configuration syntax.
"""
import json
import os
from typing import Any, Dict

from declarations import Configuration, Reference
from logger_config import get_logger

logger = get_logger(__name__)

DOCUMENT_NAME = 'main.tf.json'
AWS_PROVIDER = {'source': 'hashicorp/aws', 'version': '~> 5.0'}


def _plain(value: Any) -> Any:
    """Replace Reference objects with their interpolation strings."""
    if isinstance(value, Reference):
        return str(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def render(configuration: Configuration, region: str) -> Dict[str, Any]:
    """
    Build the JSON document for a configuration.

    Args:
        configuration: Declarations to render
        region: Region the AWS provider is configured for

    Returns:
        Dictionary ready for ``json.dump``
    """
    document: Dict[str, Any] = {
        'terraform': {'required_providers': {'aws': dict(AWS_PROVIDER)}},
        'provider': {'aws': {'region': region}},
    }

    data: Dict[str, Dict[str, Any]] = {}
    for source in configuration.data_sources():
        block = _plain(source.attributes)
        if source.depends_on:
            block['depends_on'] = list(source.depends_on)
        data.setdefault(source.type, {})[source.name] = block
    if data:
        document['data'] = data

    resources: Dict[str, Dict[str, Any]] = {}
    for resource in configuration.resources():
        block = _plain(resource.attributes)
        if resource.depends_on:
            block['depends_on'] = list(resource.depends_on)
        resources.setdefault(resource.type, {})[resource.name] = block
    if resources:
        document['resource'] = resources

    outputs = {}
    for output in configuration.outputs:
        block = {'value': _plain(output.value)}
        if output.description:
            block['description'] = output.description
        if output.sensitive:
            block['sensitive'] = True
        outputs[output.name] = block
    if outputs:
        document['output'] = outputs

    return document


def write(configuration: Configuration, directory: str, region: str) -> str:
    """
    Write ``main.tf.json`` into a directory.

    Returns:
        Path of the written document
    """
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, DOCUMENT_NAME)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(render(configuration, region), f, indent=2)
        f.write('\n')
    logger.info(f'Wrote {path}')
    return path
