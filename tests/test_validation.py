"""
Tests for structural validation.
"""
import json
import pytest
from declarations import Configuration
from validation import Problem, check_policy_document, ensure_valid, validate
from utils.exceptions import ConfigurationInvalidError

ASSUME_ROLE = json.dumps({
    'Version': '2012-10-17',
    'Statement': [{
        'Action': 'sts:AssumeRole',
        'Principal': {'Service': 'lambda.amazonaws.com'},
        'Effect': 'Allow',
    }],
})


def function_with_role():
    cfg = Configuration()
    role = cfg.add_resource('aws_iam_role', 'r', {'assume_role_policy': ASSUME_ROLE})
    cfg.add_resource('aws_lambda_function', 'f', {
        'function_name': 'f',
        'role': role.ref('arn'),
        'handler': 'handler.handle',
        'runtime': 'python3.12',
        'filename': 'function.zip',
    })
    return cfg


def messages(problems):
    return [str(p) for p in problems]


@pytest.mark.validation
class TestValidate:
    """Tests for validate and ensure_valid."""

    def test_valid_configuration(self):
        """Test a complete configuration has no problems."""
        cfg = function_with_role()
        cfg.add_output('arn', cfg.resource('aws_lambda_function', 'f').ref('arn'))
        assert validate(cfg) == []
        ensure_valid(cfg)

    def test_reference_to_undeclared_resource(self):
        """Test a reference to an undeclared resource is reported."""
        cfg = function_with_role()
        cfg.resource('aws_lambda_function', 'f').attributes['role'] = '${aws_iam_role.other.arn}'
        assert messages(validate(cfg)) == [
            'aws_lambda_function.f: reference to undeclared resource "aws_iam_role.other"'
        ]

    def test_reference_with_wrong_type(self):
        """Test a reference resolves by type as well as name."""
        cfg = function_with_role()
        cfg.resource('aws_lambda_function', 'f').attributes['role'] = '${aws_iam_policy.r.arn}'
        problems = validate(cfg)
        assert len(problems) == 1
        assert '"aws_iam_policy.r"' in problems[0].message

    def test_reference_to_undeclared_data_source(self):
        """Test a reference to an undeclared data source is reported."""
        cfg = function_with_role()
        cfg.add_resource('aws_cloudwatch_log_group', 'g', {
            'name': 'in-${data.aws_region.current.name}'
        })
        assert messages(validate(cfg)) == [
            'aws_cloudwatch_log_group.g: reference to undeclared data source "data.aws_region.current"'
        ]

    def test_unknown_attribute(self):
        """Test a reference to an attribute the type lacks is reported."""
        cfg = function_with_role()
        cfg.resource('aws_lambda_function', 'f').attributes['role'] = '${aws_iam_role.r.colour}'
        assert messages(validate(cfg)) == [
            'aws_lambda_function.f: "aws_iam_role.r" has no attribute "colour"'
        ]

    def test_declared_attribute_and_id_are_referenceable(self):
        """Test declared attributes and id can always be referenced."""
        cfg = function_with_role()
        cfg.add_resource('aws_lambda_permission', 'p', {
            'action': 'lambda:InvokeFunction',
            'function_name': '${aws_lambda_function.f.function_name}',
            'principal': 'apigateway.amazonaws.com',
            'statement_id': '${aws_iam_role.r.id}',
        })
        assert validate(cfg) == []

    def test_malformed_reference(self):
        """Test a malformed interpolation is reported on its declaration."""
        cfg = function_with_role()
        cfg.resource('aws_lambda_function', 'f').attributes['description'] = '${oops}'
        assert messages(validate(cfg)) == [
            'aws_lambda_function.f: Malformed reference "${oops}"'
        ]

    def test_depends_on_undeclared(self):
        """Test depends_on naming an undeclared address is reported."""
        cfg = function_with_role()
        cfg.resource('aws_lambda_function', 'f').depends_on.append('aws_cloudwatch_log_group.g')
        assert messages(validate(cfg)) == [
            'aws_lambda_function.f: depends_on names undeclared "aws_cloudwatch_log_group.g"'
        ]

    def test_data_source_depends_on_undeclared(self):
        """Test depends_on on a data source is checked too."""
        cfg = function_with_role()
        cfg.add_data('aws_region', 'current', depends_on=['aws_cloudwatch_log_group.g'])
        assert messages(validate(cfg)) == [
            'data.aws_region.current: depends_on names undeclared "aws_cloudwatch_log_group.g"'
        ]

    def test_escaped_interpolation_in_policy(self):
        """Test a $${ escape in a policy is neither a reference nor a problem."""
        cfg = Configuration()
        cfg.add_resource('aws_iam_policy', 'per_user', {
            'policy': json.dumps({
                'Version': '2012-10-17',
                'Statement': [{
                    'Effect': 'Allow',
                    'Action': 's3:GetObject',
                    'Resource': 'arn:aws:s3:::bucket/$${aws:username}/*',
                }],
            }),
        })
        assert validate(cfg) == []

    def test_missing_required_attribute(self):
        """Test a missing required attribute is reported."""
        cfg = function_with_role()
        del cfg.resource('aws_lambda_function', 'f').attributes['handler']
        assert messages(validate(cfg)) == [
            'aws_lambda_function.f: missing required attribute "handler"'
        ]

    def test_empty_required_attribute(self):
        """Test an empty required attribute counts as missing."""
        cfg = Configuration()
        cfg.add_resource('aws_cloudwatch_log_group', 'g', {'name': ''})
        assert messages(validate(cfg)) == [
            'aws_cloudwatch_log_group.g: missing required attribute "name"'
        ]

    def test_one_of_group(self):
        """Test one attribute from a one-of group is required."""
        cfg = function_with_role()
        del cfg.resource('aws_lambda_function', 'f').attributes['filename']
        problems = validate(cfg)
        assert len(problems) == 1
        assert problems[0].message.startswith('one of "filename", "s3_bucket", "image_uri"')

    def test_proxy_integration_needs_uri(self):
        """Test AWS_PROXY integrations need a method and uri."""
        cfg = Configuration()
        cfg.add_resource('aws_api_gateway_integration', 'i', {
            'rest_api_id': 'abc',
            'resource_id': 'def',
            'http_method': 'ANY',
            'type': 'AWS_PROXY',
        })
        assert messages(validate(cfg)) == [
            'aws_api_gateway_integration.i: missing attribute "integration_http_method" '
            'required for AWS_PROXY integrations',
            'aws_api_gateway_integration.i: missing attribute "uri" '
            'required for AWS_PROXY integrations',
        ]

    def test_mock_integration_needs_no_uri(self):
        """Test MOCK integrations need no uri."""
        cfg = Configuration()
        cfg.add_resource('aws_api_gateway_integration', 'i', {
            'rest_api_id': 'abc',
            'resource_id': 'def',
            'http_method': 'GET',
            'type': 'MOCK',
        })
        assert validate(cfg) == []

    def test_malformed_policy_document(self):
        """Test an unparseable policy document is reported."""
        cfg = function_with_role()
        cfg.resource('aws_iam_role', 'r').attributes['assume_role_policy'] = '{"Version": '
        problems = validate(cfg)
        assert len(problems) == 1
        assert problems[0].address == 'aws_iam_role.r'
        assert problems[0].message.startswith('assume_role_policy: policy document is not valid JSON')

    def test_output_reference_checked(self):
        """Test output references are checked."""
        cfg = function_with_role()
        cfg.add_output('url', '${aws_api_gateway_deployment.api.invoke_url}')
        assert messages(validate(cfg)) == [
            'output.url: reference to undeclared resource "aws_api_gateway_deployment.api"'
        ]

    def test_unknown_type_only_exports_id(self):
        """Test unknown types export id and their own attributes."""
        cfg = Configuration()
        cfg.add_resource('custom_thing', 't', {'size': 1})
        cfg.add_resource('custom_thing', 'u', {'a': '${custom_thing.t.id}', 'b': '${custom_thing.t.size}'})
        cfg.add_resource('custom_thing', 'v', {'c': '${custom_thing.t.arn}'})
        assert messages(validate(cfg)) == [
            'custom_thing.v: "custom_thing.t" has no attribute "arn"'
        ]

    def test_cycle_reported(self):
        """Test a dependency cycle is reported once."""
        cfg = function_with_role()
        cfg.resource('aws_iam_role', 'r').depends_on.append('aws_lambda_function.f')
        problems = validate(cfg)
        assert problems == [Problem(
            'aws_iam_role.r',
            'dependency cycle: aws_iam_role.r -> aws_lambda_function.f -> aws_iam_role.r'
        )]

    def test_ensure_valid_raises_with_all_problems(self):
        """Test ensure_valid raises carrying every problem."""
        cfg = function_with_role()
        attributes = cfg.resource('aws_lambda_function', 'f').attributes
        del attributes['runtime']
        attributes['role'] = '${aws_iam_role.missing.arn}'
        with pytest.raises(ConfigurationInvalidError) as exc_info:
            ensure_valid(cfg)
        assert len(exc_info.value.problems) == 2
        assert 'missing required attribute "runtime"' in exc_info.value.message


@pytest.mark.validation
class TestCheckPolicyDocument:
    """Tests for check_policy_document."""

    def test_well_formed(self):
        """Test a well formed document."""
        assert check_policy_document(ASSUME_ROLE) == []

    def test_single_statement_object(self):
        """Test Statement may be a single object."""
        document = json.dumps({
            'Version': '2012-10-17',
            'Statement': {'Effect': 'Deny', 'NotAction': 's3:*', 'Resource': '*'},
        })
        assert check_policy_document(document) == []

    def test_not_text(self):
        """Test a document must be JSON text."""
        assert check_policy_document({'Version': '2012-10-17'}) == [
            'policy document must be JSON text'
        ]

    def test_not_object(self):
        """Test a document must be a JSON object."""
        assert check_policy_document('[]') == ['policy document must be a JSON object']

    def test_missing_version_and_statement(self):
        """Test Version and Statement are required."""
        assert check_policy_document('{}') == [
            'policy document has no "Version"',
            'policy document has no "Statement"',
        ]

    def test_bad_statements(self):
        """Test each statement needs an Effect and an Action."""
        document = json.dumps({
            'Version': '2012-10-17',
            'Statement': [{'Effect': 'Maybe'}, 'x'],
        })
        assert check_policy_document(document) == [
            'statement 0 has no valid "Effect"',
            'statement 0 has no "Action"',
            'statement 1 is not an object',
        ]
