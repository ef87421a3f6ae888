# SPDX-License-Identifier: Apache-2.0

"""
Theme state for dark/light presentation.

The state itself is an immutable flag. Its two side effects, the persisted
`theme` preference and the `dark` marker on the document root, are applied
together by apply_effects() after initialization and after every toggle, so
they never disagree once an update has returned.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
import logging

from ..models.enums import ThemeName
from ..services.preferences import PreferenceStore

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
DARK_MARKER = "dark"


@dataclass(frozen=True)
class ThemeState:
    """Current presentation mode of one client."""
    is_dark: bool = False

    @property
    def name(self) -> ThemeName:
        return ThemeName.DARK if self.is_dark else ThemeName.LIGHT


@dataclass
class DocumentRoot:
    """
    Attributes of the page root element the client renders.

    Styling rules outside this service read the class list; the `lang`
    attribute follows the active display language.
    """
    classes: Set[str] = field(default_factory=set)
    lang: Optional[str] = None

    def add_class(self, name: str) -> None:
        self.classes.add(name)

    def remove_class(self, name: str) -> None:
        self.classes.discard(name)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def class_list(self) -> List[str]:
        return sorted(self.classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classList": self.class_list(),
            "className": " ".join(self.class_list()),
            "lang": self.lang
        }


def initialize(store: PreferenceStore) -> ThemeState:
    """
    Read the persisted theme.

    Anything other than "dark", including an empty or unreachable store,
    yields the light theme.
    """
    return ThemeState(is_dark=store.get(THEME_KEY) == ThemeName.DARK.value)


def toggle(state: ThemeState) -> ThemeState:
    """Flip between dark and light."""
    return ThemeState(is_dark=not state.is_dark)


def apply_effects(state: ThemeState, store: PreferenceStore, document: DocumentRoot) -> None:
    """
    Persist the theme and update the document marker, in that order.

    Re-applying an unchanged state leaves both untouched.
    """
    value = state.name.value
    if store.get(THEME_KEY) != value:
        store.set(THEME_KEY, value)

    if state.is_dark:
        document.add_class(DARK_MARKER)
    else:
        document.remove_class(DARK_MARKER)


class ThemeManager:
    """Owns the theme state of a single client for the lifetime of its scope."""

    def __init__(self, store: PreferenceStore, document: DocumentRoot):
        self.store = store
        self.document = document
        self._state = initialize(store)
        apply_effects(self._state, store, document)

    @property
    def state(self) -> ThemeState:
        return self._state

    @property
    def is_dark(self) -> bool:
        return self._state.is_dark

    def toggle(self) -> ThemeState:
        """Flip the theme and apply its effects before returning."""
        self._state = toggle(self._state)
        apply_effects(self._state, self.store, self.document)

        logger.info(
            "Theme toggled",
            extra={"client_id": self.store.client_id, "theme": self._state.name.value}
        )
        return self._state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isDark": self._state.is_dark,
            "theme": self._state.name.value,
            "document": self.document.to_dict()
        }
