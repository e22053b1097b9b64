"""
WooCommerce add-on compatibility.

When the `cs_compat_woo` setting is enabled a stub `woocommerce/woocommerce.py`
plugin is copied into the plugin directory and activated, so add-ons that look
for an active WooCommerce keep working. Disabling the setting deactivates and
removes the stub again. A file at that path which is not our stub is never
touched.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from cscompat.core.admin import AdminSettings, GENERAL_SETTINGS_FILTER
from cscompat.core.hooks import HookManager
from cscompat.core.plugin_interface import Filesystem, OptionStore, PluginHost
from cscompat.core.registry import PluginActivationError

from .errors import ErrorCode, error_message
from .transitions import Action, NO, PluginState, TARGET_VALUES, YES, decide

logger = logging.getLogger(__name__)

# Constants
STUB_SOURCE = Path(__file__).resolve().parent / "stub" / "woocommerce" / "woocommerce.py"
PLUGIN_BASENAME = "woocommerce/woocommerce.py"
COMPAT_MARKER = "Classic Store Compatibility"
COMPAT_MARKER_LINE = 2


class Compat:
    """
    Settings hook and installer for the WooCommerce stub plugin.
    All collaborators are injected so the toggle can run against fakes.
    """

    OPTION = "cs_compat_woo"

    def __init__(
        self,
        hooks: HookManager,
        options: OptionStore,
        filesystem: Filesystem,
        registry: PluginHost,
        admin: AdminSettings,
        plugin_dir: Path,
        stub_source: Path = STUB_SOURCE,
    ):
        self.hooks = hooks
        self.options = options
        self.filesystem = filesystem
        self.registry = registry
        self.admin = admin
        self.plugin_dir = Path(plugin_dir)
        self.stub_source = Path(stub_source)

    @property
    def plugin_file(self) -> Path:
        return self.plugin_dir / PLUGIN_BASENAME

    def register(self) -> None:
        self.hooks.add_filter(GENERAL_SETTINGS_FILTER, self.add_setting, 10, 1)
        self.hooks.add_action(f"add_option_{self.OPTION}", self.added_option, 10, 1)
        self.hooks.add_action(f"update_option_{self.OPTION}", self.updated_option, 10, 3)
        logger.debug("Compat: hooks registered")

    def added_option(self, option: str) -> None:
        """Hook to add_option_{option}."""
        if option != self.OPTION:
            return
        self.maybe_install_plugin()

    def updated_option(self, old_value: Any, value: Any, option: str) -> None:
        """Hook to update_option_{option}."""
        if option != self.OPTION or old_value == value:
            return
        self.maybe_install_plugin()

    def inspect(self) -> PluginState:
        """Current state of whatever occupies the stub path."""
        if not self.filesystem.exists(self.plugin_file):
            return PluginState(False)

        content = self.filesystem.get_contents_array(self.plugin_file) or []
        is_compat_file = len(content) > COMPAT_MARKER_LINE and COMPAT_MARKER in content[COMPAT_MARKER_LINE]
        return PluginState(True, is_compat_file, self.registry.is_active(PLUGIN_BASENAME))

    def maybe_install_plugin(self) -> Optional[Action]:
        """
        Install or remove the compat plugin to match the option.
        Returns the action taken, or None when the option holds neither 'yes' nor 'no'.
        """
        value = self.options.get(self.OPTION)
        if value not in TARGET_VALUES:
            logger.debug(f"Compat: ignoring option value {value!r}")
            return None

        try:
            return self._apply(value)
        except Exception as e:
            logger.error(f"Compat: unexpected failure while applying '{value}': {e}", exc_info=True)
            self.handle_exception(None)
            return None

    def _apply(self, target: str, reconciling: bool = False) -> Action:
        state = self.inspect()
        action = decide(target, state)
        logger.info(f"Compat: target={target} state={tuple(state)} -> {action.name}")

        if action is Action.ACTIVATE:
            # Already in place, just needs activation.
            self._activate(reconciling)
        elif action is Action.CONFLICT_INSTALL:
            # Something else occupies the path; leave it alone.
            self._fail(ErrorCode.INSTALL_CONFLICT, NO, reconciling, reconcile=False)
        elif action is Action.INSTALL:
            self._install(reconciling)
        elif action is Action.CONFLICT_REMOVE:
            self._fail(ErrorCode.REMOVE_CONFLICT, None, reconciling, reconcile=False)
        elif action is Action.REMOVE:
            self._remove(reconciling)
        return action

    def _activate(self, reconciling: bool) -> bool:
        try:
            self.registry.activate(PLUGIN_BASENAME)
        except PluginActivationError as e:
            logger.error(f"Compat: activation failed: {e.reason}")
            self._fail(ErrorCode.ACTIVATE_FAILED, NO, reconciling)
            return False
        return True

    def _install(self, reconciling: bool) -> None:
        if not self.filesystem.mkdir(self.plugin_file.parent):
            self._fail(ErrorCode.MKDIR_FAILED, NO, reconciling)
            return
        if not self.filesystem.copy(self.stub_source, self.plugin_file):
            self._fail(ErrorCode.COPY_FAILED, NO, reconciling)
            return
        self.registry.invalidate_cache()
        if self._activate(reconciling):
            logger.info(f"Compat: installed and activated {PLUGIN_BASENAME}")

    def _remove(self, reconciling: bool) -> None:
        self.registry.deactivate(PLUGIN_BASENAME)
        if not self.filesystem.rmdir(self.plugin_file.parent, recursive=True):
            self._fail(ErrorCode.REMOVE_FAILED, YES, reconciling)
            return
        self.registry.invalidate_cache()
        logger.info(f"Compat: removed {PLUGIN_BASENAME}")

    def _fail(self, code: ErrorCode, rollback_to: Optional[str], reconciling: bool, reconcile: bool = True) -> None:
        """
        Report an error and put the option back to a value matching the disk.
        After a failed step the stub is reconciled once with the rolled back
        value; failures during that pass are only reported.
        """
        self.handle_exception(code)
        if reconciling or rollback_to is None:
            return

        self.options.update(self.OPTION, rollback_to, notify=False)
        logger.warning(f"Compat: option {self.OPTION} rolled back to '{rollback_to}'")
        if reconcile:
            self._apply(rollback_to, reconciling=True)

    def handle_exception(self, code: Optional[int]) -> None:
        message = error_message(code)
        logger.error(f"Compat: error {code}: {message}")
        self.admin.add_error(message)

    def add_setting(self, settings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Hook to woocommerce_general_settings."""
        compat_settings = [
            {
                'title': 'WooCommerce extensions',
                'type': 'title',
                'id': 'compatibility_options',
            },
            {
                'title': 'Compatibility mode',
                'desc': 'Enable compatibility mode for WooCommerce extensions.',
                'desc_tip': (
                    'When this option is enabled, a fake WooCommerce plugin is created and activated. '
                    f'You\'ll find a {PLUGIN_BASENAME} plugin in your plugins folder.'
                ),
                'id': self.OPTION,
                'default': 'no',
                'type': 'checkbox',
            },
            {
                'type': 'sectionend',
                'id': 'compatibility_options',
            },
        ]
        return settings + compat_settings
