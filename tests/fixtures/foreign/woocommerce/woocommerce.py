"""
Plugin Name: WooCommerce
Description: The real thing.
Author: Automattic
Version: 8.0.0
"""


def loaded():
    pass


hooks.add_action('woocommerce_loaded', loaded)  # noqa: F821
