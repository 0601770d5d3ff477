"""
Main Application

Resolves options from the command line and configuration file, obtains the
RBAC snapshot and runs the policy rules pipeline.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, TextIO

from .cluster import KubernetesAuth, RBACCollector, load_snapshot_file, resolve_entries
from .core import ConfigManager, setup_logging
from .core.constants import OutputConstants
from .core.exceptions import ConfigurationError, PolicyRulesError
from .pipeline import PolicyRulesPipeline
from .rules.models import PermissionEntry

logger = logging.getLogger(__name__)

EntryProvider = Callable[['PolicyRulesOptions'], List[PermissionEntry]]


@dataclass
class PolicyRulesOptions:
    """Resolved configuration for one invocation"""
    name_pattern: Optional[str] = None
    invert_match: bool = False
    output_mode: str = OutputConstants.DEFAULT_OUTPUT_FORMAT
    cluster_context: Optional[str] = None
    skip_tls: bool = False
    input_path: Optional[str] = None
    debug: bool = False


def fetch_entries(options: PolicyRulesOptions) -> List[PermissionEntry]:
    """
    Obtain permission entries from a snapshot file or the live cluster

    Raises:
        ClusterAccessError: If the snapshot cannot be obtained
    """
    if options.input_path:
        logger.debug(f"Reading RBAC objects from {options.input_path}")
        snapshot = load_snapshot_file(options.input_path)
    else:
        auth = KubernetesAuth(context=options.cluster_context, skip_tls=options.skip_tls)
        snapshot = RBACCollector(auth.get_api_client()).fetch_snapshot()

    return resolve_entries(snapshot)


class PolicyRulesManager:
    """Main application orchestrator for the policy rules tool"""

    def __init__(self, entry_provider: Optional[EntryProvider] = None):
        """
        Initialize the manager with dependency injection

        Args:
            entry_provider: Callable returning permission entries for the
                options (defaults to fetch_entries)
        """
        self.entry_provider = entry_provider or fetch_entries

    def run(self, options: PolicyRulesOptions, stream: Optional[TextIO] = None) -> None:
        """
        Run one invocation

        The name pattern and output format are validated before the snapshot
        is requested.

        Raises:
            ConfigurationError: Invalid pattern or output format
            ClusterAccessError: Snapshot could not be obtained
            ProcessingError: Output could not be encoded
        """
        pipeline = PolicyRulesPipeline(
            name_pattern=options.name_pattern,
            invert_match=options.invert_match,
            output_mode=options.output_mode
        )

        entries = self.entry_provider(options)
        pipeline.write(entries, stream or sys.stdout)


def create_policy_rules_manager(entry_provider: Optional[EntryProvider] = None) -> PolicyRulesManager:
    """Factory function to create PolicyRulesManager with default dependencies"""
    return PolicyRulesManager(entry_provider=entry_provider)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser"""

    # Cluster parser: arguments for reaching the RBAC objects
    cluster_parser = argparse.ArgumentParser(add_help=False)
    cluster_parser.add_argument('--cluster-context', help="Cluster context. Use 'kubectl config get-contexts' to list available contexts")
    cluster_parser.add_argument('--skip-tls', action=argparse.BooleanOptionalAction, default=None,
                                help='Skip TLS verification for insecure requests')
    cluster_parser.add_argument('--input', help="Read RBAC objects from a YAML/JSON file ('-' for stdin) instead of the cluster")

    parser = argparse.ArgumentParser(
        prog='rbac-policy-rules',
        parents=[cluster_parser],
        description='List Kubernetes RBAC policy rules for a given User/ServiceAccount/Group',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search all subjects
  rbac-policy-rules -e '.*'

  # Search all subjects that contain myname
  rbac-policy-rules -e '.*myname.*'

  # Lookup system accounts (all accounts that start with system:)
  rbac-policy-rules -e '^system:.*'

  # Lookup all accounts that DO NOT start with system:
  rbac-policy-rules -ne '^system:.*'
        """
    )
    parser.add_argument('name', nargs='?', help='Subject name pattern (used when --regex is not given)')
    parser.add_argument('-e', '--regex', help='Run the lookup using a regex match')
    match_group = parser.add_mutually_exclusive_group()
    match_group.add_argument('-n', '--not', dest='inverse', action='store_const', const=True, default=None,
                             help="Inverse the regex matching. Use to search for users that do not match '^system:.*'")
    match_group.add_argument('--match', dest='inverse', action='store_const', const=False,
                             help='Keep the subjects that match, overriding filter.inverse from the configuration file')
    parser.add_argument('-o', '--output', help='Output type: table | json | yaml (default: table)')
    parser.add_argument('--config', help='Configuration file path')
    parser.add_argument('--generate-config', action='store_true', help='Print a configuration file template and exit')
    parser.add_argument('--debug', action=argparse.BooleanOptionalAction, default=None, help='Enable debug logging')

    return parser


def _flag_or_config(flag: Optional[bool], config_manager: ConfigManager, key: str) -> bool:
    """A boolean flag given on the command line wins over the configuration value."""
    if flag is not None:
        return flag
    return bool(config_manager.get_value(key, False))


def resolve_options(args: argparse.Namespace, config_manager: ConfigManager) -> PolicyRulesOptions:
    """
    Merge command-line arguments with configuration file values

    Command-line values take precedence, including explicit --no-* / --match
    flags that switch off a boolean set in the configuration file; --regex
    takes precedence over the positional name.
    """
    return PolicyRulesOptions(
        name_pattern=args.regex or args.name or config_manager.get_value('filter.regex'),
        invert_match=_flag_or_config(args.inverse, config_manager, 'filter.inverse'),
        output_mode=args.output or config_manager.get_value('output.format', OutputConstants.DEFAULT_OUTPUT_FORMAT),
        cluster_context=args.cluster_context or config_manager.get_value('cluster.context') or None,
        skip_tls=_flag_or_config(args.skip_tls, config_manager, 'cluster.skip_tls'),
        input_path=args.input or config_manager.get_value('cluster.input') or None,
        debug=_flag_or_config(args.debug, config_manager, 'global.debug'),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    config_manager = ConfigManager()

    if args.generate_config:
        print(config_manager.get_config_template_content())
        return 0

    try:
        if args.config:
            config_manager.load_config(args.config)

        options = resolve_options(args, config_manager)
        if options.debug and not args.debug:
            setup_logging(True)

        create_policy_rules_manager().run(options)
        return 0

    except ConfigurationError as e:
        logger.debug(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PolicyRulesError as e:
        logger.debug(f"Policy rules error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
