"""
Command line entry point: validate the deployment, show its dependency
order, or synthesize ``main.tf.json`` with the function archive next to it.

    python synth.py validate
    python synth.py graph
    python synth.py synth --out build --check-region
"""
import argparse
import os
import sys
from typing import List, Optional

from archive import build_package
from config import get_config
from deployment import DEFAULT_ARCHIVE_NAME, build_deployment
from graph import DependencyGraph
from logger_config import get_logger
from render import write
from services.region_service import RegionService
from utils.exceptions import (
    ConfigurationInvalidError, DependencyCycleError, PackagingError, RegionLookupError,
)
from validation import ensure_valid, validate

logger = get_logger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# What the function imports at runtime
FUNCTION_SOURCES = [
    'handler.py', 'logger_config.py', 'utils/__init__.py', 'utils/decorators.py',
]


def cmd_validate(args) -> int:
    problems = validate(build_deployment(get_config()))
    for problem in problems:
        print(problem)
    if problems:
        return 1
    print('Configuration is valid')
    return 0


def cmd_graph(args) -> int:
    graph = DependencyGraph.from_configuration(build_deployment(get_config()))
    order = graph.destroy_order() if args.destroy else graph.topological_order()
    for address in order:
        dependencies = graph.dependencies(address)
        suffix = ' <- ' + ', '.join(dependencies) if dependencies else ''
        print(f'{address}{suffix}')
    return 0


def cmd_synth(args) -> int:
    config = get_config()
    out_dir = args.out or config.output_dir

    region = config.aws_region
    if args.check_region:
        region = RegionService(config.aws_region).describe()['name']

    package = build_package(
        FUNCTION_SOURCES, os.path.join(out_dir, DEFAULT_ARCHIVE_NAME), PROJECT_ROOT
    )
    configuration = build_deployment(config, package)
    ensure_valid(configuration)
    path = write(configuration, out_dir, region)
    print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Declare, check and synthesize the serverless deployment.'
    )
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser(
        'validate', help='check references, required attributes and cycles'
    ).set_defaults(func=cmd_validate)

    graph_parser = commands.add_parser('graph', help='print creation order')
    graph_parser.add_argument(
        '--destroy', action='store_true', help='print destruction order instead'
    )
    graph_parser.set_defaults(func=cmd_graph)

    synth_parser = commands.add_parser(
        'synth', help='package the function and write main.tf.json'
    )
    synth_parser.add_argument('--out', help='output directory (default: OUTPUT_DIR)')
    synth_parser.add_argument(
        '--check-region', action='store_true',
        help='confirm the configured region exists before writing'
    )
    synth_parser.set_defaults(func=cmd_synth)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ValueError as e:
        # Configuration errors from the environment
        logger.error(str(e))
        return 2
    except (ConfigurationInvalidError, DependencyCycleError,
            PackagingError, RegionLookupError) as e:
        logger.error(e.message)
        return 1


if __name__ == '__main__':
    sys.exit(main())
