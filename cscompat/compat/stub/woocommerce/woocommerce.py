"""
WooCommerce
Plugin Name:  Classic Store Compatibility for Woo Addons
Description:  Compatibility plugin for some WooCommerce addons to work with Classic Store.
Author:       Classic Store Community
Version:      1.0.0
Requires CP:  2.0
Requires Python: 3.8
Update URI:   false
License:      GPL2
"""

# Only the plugin host injects these names.
if 'hooks' not in globals() or 'plugin_basename' not in globals():
    raise ImportError("This file is a plugin and must be loaded by the plugin host.")

CS_WOOADDONSCOMPAT_PLUGIN_BASE = plugin_basename(__file__)  # noqa: F821
CS_WOOADDONSCOMPAT_VERSION = '1.0.0'

VIEW_DETAILS_INDEX = 2


def hide_view_details(plugin_meta, plugin_file):
    """
    Filter plugin row meta to remove "View details".
    """
    if plugin_file == CS_WOOADDONSCOMPAT_PLUGIN_BASE and len(plugin_meta) > VIEW_DETAILS_INDEX:
        plugin_meta = plugin_meta[:VIEW_DETAILS_INDEX] + plugin_meta[VIEW_DETAILS_INDEX + 1:]
    return plugin_meta


hooks.add_filter('plugin_row_meta', hide_view_details, 10, 2)  # noqa: F821
