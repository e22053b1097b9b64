#!/usr/bin/env python
"""
Command-line interface for the Classic Store compatibility shim
"""

import argparse
import sys

from cscompat.version_info import __version__, __description__


def print_version():
    """Print version information."""
    print(f"cscompat v{__version__}")
    print(__description__)


def start_server(args):
    """Start the Flask server."""
    from cscompat.app import create_app
    from cscompat.config import load_config

    config = load_config()
    config.debug = config.debug or args.debug
    app = create_app(config)

    print(f"Starting cscompat v{__version__}")
    print(f"Server: http://{args.host}:{args.port}")
    print(f"Plugin directory: {config.plugin_dir}")
    print("Press Ctrl+C to stop")
    print()

    app.run(host=args.host, port=args.port, debug=config.debug)


def _host(args):
    from cscompat.config import load_config
    from cscompat.core.logging_config import setup_logging
    from cscompat.host import build_host

    config = load_config()
    config.debug = config.debug or args.debug
    setup_logging(config)
    return build_host(config)


def set_compat(args, enabled: bool) -> int:
    """Save the compatibility checkbox through the settings page so its hooks run."""
    from cscompat.compat.compat import Compat

    host = _host(args)
    form = {field['id']: field['value'] for field in host.admin.render() if 'value' in field}
    form[Compat.OPTION] = 'yes' if enabled else 'no'

    errors = host.admin.save(form)
    for error in errors:
        print(f"Error: {error}", file=sys.stderr)

    print(f"Compatibility mode: {host.options.get(Compat.OPTION)}")
    return 1 if errors else 0


def show_status(args) -> int:
    from cscompat.compat.compat import Compat, PLUGIN_BASENAME

    host = _host(args)
    state = host.compat.inspect()
    print(f"Compatibility mode: {host.options.get(Compat.OPTION, 'no')}")
    print(f"Plugin file:        {host.compat.plugin_file} ({'present' if state.file_exists else 'absent'})")
    if state.file_exists:
        print(f"Compat stub:        {'yes' if state.is_compat_file else 'no (foreign plugin)'}")
    print(f"Active:             {'yes' if host.registry.is_active(PLUGIN_BASENAME) else 'no'}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description=f'cscompat v{__version__}',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cscompat --version              Show version information
  cscompat start                  Start the admin API on 127.0.0.1:8000
  cscompat enable                 Install and activate the WooCommerce stub
  cscompat disable                Deactivate and remove the WooCommerce stub
  cscompat status                 Show the compatibility state
        """
    )

    parser.add_argument(
        '--version', '-v',
        action='store_true',
        help='Show version information'
    )

    default_host = '127.0.0.1'

    parser.add_argument(
        '--host',
        type=str,
        default=default_host,
        help=f'Host to bind to (default: {default_host})'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        default=8000,
        help='Port to bind to (default: 8000)'
    )
    parser.add_argument(
        '--debug', '-d',
        action='store_true',
        help='Run in debug mode'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.add_parser('start', help='Start the admin API server')
    subparsers.add_parser('enable', help='Enable compatibility mode')
    subparsers.add_parser('disable', help='Disable compatibility mode')
    subparsers.add_parser('status', help='Show compatibility mode state')

    args = parser.parse_args(argv)

    if args.version:
        print_version()
        return 0

    try:
        if args.command == 'enable':
            return set_compat(args, True)
        if args.command == 'disable':
            return set_compat(args, False)
        if args.command == 'status':
            return show_status(args)

        # Default behavior: Start Server
        start_server(args)
        return 0
    except KeyboardInterrupt:
        print("\nStopped.")
        return 0
    except Exception as e:
        if args.debug:
            import traceback
            traceback.print_exc()
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
