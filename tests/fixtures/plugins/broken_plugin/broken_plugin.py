"""
Plugin Name: Broken Plugin
Version: 0.0.1
"""

hooks.add_filter('broken_greeting', str.upper)  # noqa: F821

raise RuntimeError("broken on purpose")
