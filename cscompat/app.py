"""
Classic Store compatibility admin
A Flask application exposing the general settings page and the plugin list.
"""

import logging
import sys
import traceback
from typing import Optional

from flask import Flask, current_app, jsonify, request

from cscompat.compat.compat import Compat, PLUGIN_BASENAME
from cscompat.config import AppConfig, load_config
from cscompat.core.logging_config import setup_logging
from cscompat.host import Host, build_host
from cscompat.version_info import __version__ as VERSION

logger = logging.getLogger(__name__)


def get_host() -> Host:
    return current_app.extensions['cscompat']


def create_app(config: Optional[AppConfig] = None, init_logging: bool = True) -> Flask:
    """Build the Flask app and its host collaborators."""
    config = config or load_config()

    if init_logging:
        setup_logging(config)
    logger.info(f"Application starting - Version {VERSION}")

    app = Flask(__name__)
    app.extensions['cscompat'] = build_host(config)

    register_routes(app)
    return app


def register_routes(app: Flask) -> None:

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"500 Error: {error}\n{traceback.format_exc()}")
        return jsonify({'error': f"Internal Server Error: {error}"}), 500

    @app.route('/api/version')
    def get_version():
        return jsonify({'version': VERSION})

    @app.route('/api/settings/general', methods=['GET'])
    def get_general_settings():
        return jsonify({'settings': get_host().admin.render()})

    @app.route('/api/settings/general', methods=['POST'])
    def save_general_settings():
        """
        Save the general settings page.
        Accepts a JSON object or a form post; checkboxes missing from the body save as 'no'.
        Toggle failures are reported in 'errors' with a 200, as the settings page shows them.
        """
        host = get_host()
        data = request.get_json(silent=True)
        if data is None:
            data = request.form.to_dict()
        if not isinstance(data, dict):
            return jsonify({'error': 'Expected a JSON object or form data'}), 400

        logger.info(f"Saving general settings: {sorted(data.keys())}")
        errors = host.admin.save(data)
        return jsonify({
            'success': not errors,
            'errors': errors,
            'messages': host.admin.get_messages(),
            'settings': host.admin.render(),
        })

    @app.route('/api/plugins')
    def get_plugins():
        """Return the plugins found in the plugin directory with their active state."""
        return jsonify(get_host().registry.list_plugins())

    @app.route('/api/compat')
    def get_compat_status():
        host = get_host()
        state = host.compat.inspect()
        return jsonify({
            'option': host.options.get(Compat.OPTION, 'no'),
            'plugin': PLUGIN_BASENAME,
            'file_exists': state.file_exists,
            'is_compat_file': state.is_compat_file,
            'active': state.is_active,
        })

    @app.route('/debug/info')
    def debug_info():
        host = get_host()
        return jsonify({
            'version': VERSION,
            'config': host.config.to_dict(),
            'frozen': getattr(sys, 'frozen', False),
            'python_path': str(sys.executable),
            'active_plugins': host.registry.get_active_plugins(),
        })
