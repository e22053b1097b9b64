import unittest
import sys
import shutil
import tempfile
from pathlib import Path

# Ensure we can import cscompat
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cscompat.compat.compat import PLUGIN_BASENAME, STUB_SOURCE
from cscompat.core.hooks import HookManager
from cscompat.core.loader import module_name_for
from cscompat.core.options import MemoryOptionStore
from cscompat.core.registry import ACTIVE_PLUGINS_OPTION, PluginActivationError, PluginRegistry, read_plugin_headers

FIXTURES = PROJECT_ROOT / 'tests' / 'fixtures'


class TestPluginRegistry(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.plugin_dir = self.test_dir / 'plugins'
        shutil.copytree(FIXTURES / 'plugins', self.plugin_dir)

        self.hooks = HookManager()
        self.options = MemoryOptionStore(self.hooks)
        self.registry = PluginRegistry(self.plugin_dir, self.options, self.hooks)

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def install_stub(self):
        (self.plugin_dir / 'woocommerce').mkdir()
        shutil.copyfile(STUB_SOURCE, self.plugin_dir / 'woocommerce' / 'woocommerce.py')
        self.registry.invalidate_cache()

    def test_read_headers(self):
        headers = read_plugin_headers(self.plugin_dir / 'hello_plugin' / 'hello_plugin.py')
        self.assertEqual(headers['name'], 'Hello Plugin')
        self.assertEqual(headers['version'], '0.1.0')
        self.assertEqual(headers['license'], '')

    def test_get_plugins_skips_files_without_header(self):
        plugins = self.registry.get_plugins()
        self.assertIn('hello_plugin/hello_plugin.py', plugins)
        self.assertIn('broken_plugin/broken_plugin.py', plugins)
        self.assertNotIn('not_a_plugin/helpers.py', plugins)

    def test_plugin_list_is_cached_until_invalidated(self):
        self.registry.get_plugins()
        (self.plugin_dir / 'woocommerce').mkdir()
        shutil.copyfile(STUB_SOURCE, self.plugin_dir / 'woocommerce' / 'woocommerce.py')

        self.assertNotIn('woocommerce/woocommerce.py', self.registry.get_plugins())
        self.registry.invalidate_cache()
        self.assertIn('woocommerce/woocommerce.py', self.registry.get_plugins())

    def test_plugin_basename(self):
        path = self.plugin_dir / 'hello_plugin' / 'hello_plugin.py'
        self.assertEqual(self.registry.plugin_basename(path), 'hello_plugin/hello_plugin.py')
        self.assertEqual(self.registry.plugin_basename('/woocommerce/woocommerce.py'), 'woocommerce/woocommerce.py')

    def test_activate_loads_plugin_and_persists_state(self):
        self.registry.activate('hello_plugin/hello_plugin.py')

        self.assertTrue(self.registry.is_active('hello_plugin/hello_plugin.py'))
        self.assertEqual(self.options.get(ACTIVE_PLUGINS_OPTION), ['hello_plugin/hello_plugin.py'])
        self.assertEqual(self.hooks.apply_filters('greeting', 'hi'), 'HI')

    def test_activate_twice_loads_once(self):
        self.registry.activate('hello_plugin/hello_plugin.py')
        self.registry.activate(self.plugin_dir / 'hello_plugin' / 'hello_plugin.py')

        self.assertEqual(self.options.get(ACTIVE_PLUGINS_OPTION), ['hello_plugin/hello_plugin.py'])
        self.assertEqual(self.hooks.apply_filters('greeting', 'hi'), 'HI')

    def test_activate_missing_file(self):
        with self.assertRaises(PluginActivationError):
            self.registry.activate('woocommerce/woocommerce.py')

    def test_activate_requires_header(self):
        with self.assertRaises(PluginActivationError):
            self.registry.activate('not_a_plugin/helpers.py')

    def test_activate_broken_plugin(self):
        with self.assertRaises(PluginActivationError) as ctx:
            self.registry.activate('broken_plugin/broken_plugin.py')

        self.assertIn('broken on purpose', ctx.exception.reason)
        self.assertFalse(self.registry.is_active('broken_plugin/broken_plugin.py'))

    def test_deactivate(self):
        events = []
        self.hooks.add_action('activated_plugin', lambda name: events.append(('activated', name)))
        self.hooks.add_action('deactivated_plugin', lambda name: events.append(('deactivated', name)))

        self.registry.activate('hello_plugin/hello_plugin.py')
        self.registry.deactivate(['/hello_plugin/hello_plugin.py'])

        self.assertFalse(self.registry.is_active('hello_plugin/hello_plugin.py'))
        self.assertEqual(self.options.get(ACTIVE_PLUGINS_OPTION), [])
        self.assertEqual(events, [
            ('activated', 'hello_plugin/hello_plugin.py'),
            ('deactivated', 'hello_plugin/hello_plugin.py'),
        ])

    def test_load_active_plugins_skips_broken_and_missing(self):
        self.options.update(ACTIVE_PLUGINS_OPTION, [
            'broken_plugin/broken_plugin.py',
            'gone/gone.py',
            'hello_plugin/hello_plugin.py',
        ])

        self.registry.load_active_plugins()

        self.assertEqual(self.hooks.apply_filters('greeting', 'hi'), 'HI')
        self.assertNotIn('gone/gone.py', self.registry.get_active_plugins())

    def test_stub_hides_view_details_for_itself_only(self):
        self.install_stub()
        self.registry.activate('woocommerce/woocommerce.py')

        self.assertEqual(
            self.registry.get_plugin_row_meta('woocommerce/woocommerce.py'),
            ['Version 1.0.0', 'By Classic Store Community'],
        )
        self.assertEqual(
            self.registry.get_plugin_row_meta('hello_plugin/hello_plugin.py'),
            ['Version 0.1.0', 'By Test', 'View details'],
        )

    def test_deactivate_removes_plugin_hooks(self):
        self.registry.activate('hello_plugin/hello_plugin.py')
        self.registry.deactivate('hello_plugin/hello_plugin.py')

        self.assertFalse(self.hooks.has_filter('greeting'))
        self.assertNotIn(module_name_for('hello_plugin/hello_plugin.py'), sys.modules)

    def test_reactivation_runs_plugin_again(self):
        self.registry.activate('hello_plugin/hello_plugin.py')
        self.registry.deactivate('hello_plugin/hello_plugin.py')
        self.registry.activate('hello_plugin/hello_plugin.py')

        self.assertEqual(self.hooks.apply_filters('greeting', 'hi'), 'HI')

    def test_plugin_replacing_removed_stub_is_loaded(self):
        self.install_stub()
        self.registry.activate(PLUGIN_BASENAME)
        self.registry.deactivate(PLUGIN_BASENAME)
        shutil.rmtree(self.plugin_dir / 'woocommerce')

        shutil.copytree(FIXTURES / 'foreign' / 'woocommerce', self.plugin_dir / 'woocommerce')
        self.registry.invalidate_cache()
        self.registry.activate(PLUGIN_BASENAME)

        self.assertTrue(self.hooks.has_filter('woocommerce_loaded'))
        self.assertEqual(len(self.registry.get_plugin_row_meta(PLUGIN_BASENAME)), 3)

    def test_failed_load_leaves_no_hooks_behind(self):
        with self.assertRaises(PluginActivationError):
            self.registry.activate('broken_plugin/broken_plugin.py')

        self.assertFalse(self.hooks.has_filter('broken_greeting'))

    def test_stub_refuses_to_load_outside_host(self):
        import runpy
        with self.assertRaises(ImportError):
            runpy.run_path(str(STUB_SOURCE))


if __name__ == '__main__':
    unittest.main()
