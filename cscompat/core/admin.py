import logging
from typing import Any, Dict, List, Mapping

from .hooks import HookManager
from .plugin_interface import OptionStore

logger = logging.getLogger(__name__)

GENERAL_SETTINGS_FILTER = "woocommerce_general_settings"
STRUCTURAL_TYPES = ('title', 'sectionend')
TRUTHY_VALUES = ('yes', '1', 'on', 'true')

BASE_GENERAL_SETTINGS = [
    {
        'title': 'General options',
        'type': 'title',
        'id': 'general_options',
    },
    {
        'title': 'Currency',
        'desc': 'This controls what currency prices are listed at in the catalog.',
        'id': 'woocommerce_currency',
        'default': 'USD',
        'type': 'text',
    },
    {
        'type': 'sectionend',
        'id': 'general_options',
    },
]


def checkbox_value(raw: Any) -> str:
    """Normalise a submitted checkbox to 'yes' / 'no'."""
    if raw is True:
        return 'yes'
    if isinstance(raw, str) and raw.strip().lower() in TRUTHY_VALUES:
        return 'yes'
    return 'no'


class AdminSettings:
    """
    The host's general settings page.
    Plugins extend it through the `woocommerce_general_settings` filter and
    report problems with add_error() while it saves.
    """

    def __init__(self, hooks: HookManager, options: OptionStore):
        self.hooks = hooks
        self.options = options
        self._errors: List[str] = []
        self._messages: List[str] = []

    def add_error(self, message: str) -> None:
        logger.warning(f"Settings error: {message}")
        self._errors.append(message)

    def add_message(self, message: str) -> None:
        self._messages.append(message)

    def get_errors(self) -> List[str]:
        return list(self._errors)

    def get_messages(self) -> List[str]:
        return list(self._messages)

    def clear_errors(self) -> None:
        self._errors = []

    def clear_messages(self) -> None:
        self._messages = []

    def get_settings(self) -> List[Dict[str, Any]]:
        base = [dict(field) for field in BASE_GENERAL_SETTINGS]
        return self.hooks.apply_filters(GENERAL_SETTINGS_FILTER, base)

    def render(self) -> List[Dict[str, Any]]:
        """Settings fragment with each field's current value."""
        rendered = []
        for field in self.get_settings():
            field = dict(field)
            if 'id' in field and field.get('type') not in STRUCTURAL_TYPES:
                field['value'] = self.options.get(field['id'], field.get('default'))
            rendered.append(field)
        return rendered

    def save(self, form: Mapping[str, Any]) -> List[str]:
        """
        Store submitted values for every field on the page.
        Unchecked checkboxes are absent from a submitted form, so they save as 'no'.
        Returns the errors reported while saving.
        """
        self.clear_errors()
        self.clear_messages()

        for field in self.get_settings():
            field_id = field.get('id')
            field_type = field.get('type')
            if not field_id or field_type in STRUCTURAL_TYPES:
                continue

            if field_type == 'checkbox':
                value = checkbox_value(form.get(field_id))
            elif field_id in form:
                value = str(form[field_id])
            else:
                continue

            try:
                self.options.update(field_id, value)
            except Exception as e:
                logger.error(f"Failed to save setting '{field_id}': {e}", exc_info=True)
                self.add_error(f"Could not save {field.get('title', field_id)}.")

        if not self._errors:
            self.add_message('Your settings have been saved.')
        return self.get_errors()
