__version__ = "1.0.0"
__description__ = "WooCommerce add-on compatibility shim for Classic Store"
