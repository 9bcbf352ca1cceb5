"""
Ad settings.

Site-wide ad settings, grouped by section. Each setting is stored as its own
option under ``_newspack_ads_<section>_<key>``.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from ads_manager.errors import ValidationError
from ads_manager.utils.logging import setup_logger
from ads_manager.utils.options import OptionStore

logger = setup_logger(__name__)

OPTION_KEY_PREFIX = "_newspack_ads_"

class Setting(BaseModel):
    """Definition of a setting, with its current value once loaded."""
    section: str
    key: str
    type: str  # boolean, int, float, string
    default: Any = None
    public: bool = False
    description: str = ""
    help: str = ""
    value: Any = None

DEFAULT_SETTINGS = [
    Setting(
        description="Lazy loading",
        help="Enables pages to load faster, reduces resource consumption and contention, and improves viewability rate.",
        section="lazy_load",
        key="active",
        type="boolean",
        default=True,
        public=True
    ),
    Setting(
        description="Fetch margin percent",
        help="Minimum distance from the current viewport a slot must be before we fetch the ad as a percentage of viewport size.",
        section="lazy_load",
        key="fetch_margin_percent",
        type="int",
        default=100,
        public=True
    ),
    Setting(
        description="Render margin percent",
        help="Minimum distance from the current viewport a slot must be before we render an ad.",
        section="lazy_load",
        key="render_margin_percent",
        type="int",
        default=0,
        public=True
    ),
    Setting(
        description="Mobile scaling",
        help="A multiplier applied to margins on mobile devices. This allows varying margins on mobile vs. desktop.",
        section="lazy_load",
        key="mobile_scaling",
        type="float",
        default=2,
        public=True
    ),
]

def get_setting_option_key(setting: Setting) -> str:
    return f"{OPTION_KEY_PREFIX}{setting.section}_{setting.key}"

def coerce_value(value: Any, type_name: str) -> Any:
    """
    Cast a value to a setting type.

    Raises:
        ValidationError: If the value cannot be cast
    """
    try:
        if type_name == "boolean":
            if isinstance(value, str):
                return value.strip().lower() not in ("", "0", "false", "no", "off")
            return bool(value)
        if type_name == "int":
            return int(float(value)) if value not in (None, "") else 0
        if type_name == "float":
            return float(value) if value not in (None, "") else 0.0
        if type_name == "string":
            return "" if value is None else str(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValidationError(
            f"Invalid {type_name} value: {value!r}",
            operation="update_setting",
            details={"type": type_name}
        ) from e
    raise ValidationError(f"Unknown setting type: {type_name}", operation="update_setting")

class AdsSettings:
    """Settings registry backed by the option store."""

    def __init__(self, store: OptionStore, extra_settings: Optional[List[Setting]] = None):
        """
        Initialize settings.

        Args:
            store: Option store
            extra_settings: Settings contributed in addition to the defaults
        """
        self.store = store
        self.definitions = list(DEFAULT_SETTINGS) + list(extra_settings or [])

    def get_settings_list(self) -> List[Setting]:
        """Every setting with its current value."""
        settings = []
        for definition in self.definitions:
            default = definition.default if definition.default else False
            value = self.store.get_option(get_setting_option_key(definition), default)
            settings.append(definition.model_copy(update={"value": value}))
        return settings

    def _find(self, section: str, key: str) -> Optional[Setting]:
        for definition in self.definitions:
            if definition.section == section and definition.key == key:
                return definition
        return None

    def update_setting(self, section: str, key: str, value: Any) -> bool:
        """
        Update a setting from a section.

        Returns:
            bool: Whether the stored value changed

        Raises:
            ValidationError: If the key does not match a setting of the section
        """
        definition = self._find(section, key)
        if definition is None:
            raise ValidationError(
                "Invalid setting.",
                operation="update_setting",
                details={"section": section, "key": key}
            )
        return self.store.update_option(
            get_setting_option_key(definition),
            coerce_value(value, definition.type)
        )

    def update_section(self, section: str, values: Dict[str, Any]) -> List[Setting]:
        """
        Update the settings of a section.

        Keys are applied in order; the first invalid key stops the update.

        Returns:
            List[Setting]: All settings
        """
        for key, value in values.items():
            self.update_setting(section, key, value)
        logger.info(f"Updated settings section {section}")
        return self.get_settings_list()

    def get_settings(self, public_only: bool = False) -> Dict[str, Dict[str, Any]]:
        """Setting values organized by section."""
        values: Dict[str, Dict[str, Any]] = {}
        for setting in self.get_settings_list():
            section = values.setdefault(setting.section, {})
            if public_only and not setting.public:
                continue
            section[setting.key] = coerce_value(setting.value, setting.type)
        return values
