"""
The deployment: one function behind an API gateway, with its execution role
and log group.

Every request to the API, at the root path or any sub path, is proxied to
the function. The function's invocation URL is surfaced as ``base_url``.
"""
import json
import os
from typing import Optional

from archive import Package
from config import Config
from declarations import Configuration
from logger_config import get_logger

logger = get_logger(__name__)

DEFAULT_ARCHIVE_NAME = 'function.zip'


def _policy(*statements: dict) -> str:
    return json.dumps({'Version': '2012-10-17', 'Statement': list(statements)}, indent=2)


def build_deployment(config: Config, package: Optional[Package] = None) -> Configuration:
    """
    Declare the deployment described by a Config.

    Args:
        config: Deployment settings
        package: The function archive; its file name and hash are declared
            on the function when given

    Returns:
        Configuration holding every declaration and the ``base_url`` output
    """
    cfg = Configuration()

    region = cfg.add_data('aws_region', 'current')

    role = cfg.add_resource('aws_iam_role', 'lambda_exec', {
        'name': f'{config.function_name}-exec',
        'assume_role_policy': _policy({
            'Action': 'sts:AssumeRole',
            'Principal': {'Service': 'lambda.amazonaws.com'},
            'Effect': 'Allow',
            'Sid': '',
        }),
    })

    log_group = cfg.add_resource('aws_cloudwatch_log_group', 'lambda', {
        'name': config.log_group_name,
        'retention_in_days': config.log_retention_days,
    })

    logging_policy = cfg.add_resource('aws_iam_policy', 'lambda_logging', {
        'name': f'{config.function_name}-logging',
        'path': '/',
        'description': 'IAM policy for logging from a lambda',
        'policy': _policy({
            'Action': ['logs:CreateLogStream', 'logs:PutLogEvents'],
            'Resource': (
                f'arn:aws:logs:{region.ref("name")}:*:'
                f'log-group:{config.log_group_name}:*'
            ),
            'Effect': 'Allow',
        }),
    })

    attachment = cfg.add_resource('aws_iam_role_policy_attachment', 'lambda_logs', {
        'role': role.ref('name'),
        'policy_arn': logging_policy.ref('arn'),
    })

    function_attributes = {
        'function_name': config.function_name,
        'role': role.ref('arn'),
        'handler': config.function_handler,
        'runtime': config.function_runtime,
        'memory_size': config.function_memory_mb,
        'timeout': config.function_timeout_seconds,
        'filename': DEFAULT_ARCHIVE_NAME,
        'environment': {'variables': {'LOG_LEVEL': config.log_level}},
    }
    if package is not None:
        function_attributes['filename'] = os.path.basename(package.path)
        function_attributes['source_code_hash'] = package.source_code_hash

    # The role must be able to write logs, and the log group must exist with
    # its retention, before the function first runs
    function = cfg.add_resource(
        'aws_lambda_function', 'app', function_attributes,
        depends_on=[attachment, log_group],
    )

    api = cfg.add_resource('aws_api_gateway_rest_api', 'api', {
        'name': config.api_name,
        'description': f'HTTP front door for {config.function_name}',
    })

    proxy = cfg.add_resource('aws_api_gateway_resource', 'proxy', {
        'rest_api_id': api.ref('id'),
        'parent_id': api.ref('root_resource_id'),
        'path_part': '{proxy+}',
    })

    integrations = []
    for suffix, resource_id in (('', proxy.ref('id')), ('_root', api.ref('root_resource_id'))):
        method = cfg.add_resource('aws_api_gateway_method', f'proxy{suffix}', {
            'rest_api_id': api.ref('id'),
            'resource_id': resource_id,
            'http_method': 'ANY',
            'authorization': 'NONE',
        })
        integrations.append(cfg.add_resource('aws_api_gateway_integration', f'lambda{suffix}', {
            'rest_api_id': api.ref('id'),
            'resource_id': method.ref('resource_id'),
            'http_method': method.ref('http_method'),
            'integration_http_method': 'POST',
            'type': 'AWS_PROXY',
            'uri': function.ref('invoke_arn'),
        }))

    # Integrations are not referenced by the deployment, so order explicitly
    deployment = cfg.add_resource('aws_api_gateway_deployment', 'api', {
        'rest_api_id': api.ref('id'),
        'stage_name': config.stage_name,
    }, depends_on=integrations)

    cfg.add_resource('aws_lambda_permission', 'apigw', {
        'statement_id': 'AllowAPIGatewayInvoke',
        'action': 'lambda:InvokeFunction',
        'function_name': function.ref('function_name'),
        'principal': 'apigateway.amazonaws.com',
        'source_arn': f'{api.ref("execution_arn")}/*/*',
    })

    cfg.add_output(
        'base_url', deployment.ref('invoke_url'),
        description='URL the API gateway serves the function on',
    )

    logger.info(
        f'Declared {len(cfg)} resources and data sources for {config.function_name}'
    )
    return cfg
