"""Abstract factory demo: families of GUI widgets per platform."""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Type

Writer = Callable[[str], None]


class Button(ABC):
    def __init__(self, writer: Optional[Writer] = None):
        self._writer = writer or print

    @abstractmethod
    def paint(self) -> str:
        pass


class TextBox(ABC):
    def __init__(self, writer: Optional[Writer] = None):
        self._writer = writer or print

    @abstractmethod
    def render(self) -> str:
        pass


class WinButton(Button):
    def paint(self) -> str:
        line = "Rendering a button in Windows style."
        self._writer(line)
        return line


class WinTextBox(TextBox):
    def render(self) -> str:
        line = "Rendering a text box in Windows style."
        self._writer(line)
        return line


class MacButton(Button):
    def paint(self) -> str:
        line = "Rendering a button in MacOS style."
        self._writer(line)
        return line


class MacTextBox(TextBox):
    def render(self) -> str:
        line = "Rendering a text box in MacOS style."
        self._writer(line)
        return line


class GUIFactory(ABC):
    """Creates widgets that belong to the same platform family."""

    def __init__(self, writer: Optional[Writer] = None):
        self._writer = writer

    @abstractmethod
    def create_button(self) -> Button:
        pass

    @abstractmethod
    def create_text_box(self) -> TextBox:
        pass


class WinFactory(GUIFactory):
    def create_button(self) -> Button:
        return WinButton(self._writer)

    def create_text_box(self) -> TextBox:
        return WinTextBox(self._writer)


class MacFactory(GUIFactory):
    def create_button(self) -> Button:
        return MacButton(self._writer)

    def create_text_box(self) -> TextBox:
        return MacTextBox(self._writer)


_FACTORIES: Dict[str, Type[GUIFactory]] = {
    "win": WinFactory,
    "mac": MacFactory,
}


def get_gui_factory(platform: str, writer: Optional[Writer] = None) -> GUIFactory:
    """
    Select the widget factory for a platform.

    Raises:
        ValueError: If the platform is not supported
    """
    factory_class = _FACTORIES.get(platform.strip().lower())
    if factory_class is None:
        raise ValueError(
            f"Unsupported platform '{platform}'. Available platforms: {list(_FACTORIES)}"
        )
    return factory_class(writer)
