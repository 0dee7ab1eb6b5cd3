"""
System Tray Manager for WordBar.
Shows the current word in the tray and hosts the menu.
"""
import logging
from typing import Callable, Optional

from pystray import Icon, MenuItem, Menu
from PIL import Image, ImageDraw, ImageFont

from wordbar.constants import (
    APP_NAME, VERSION, ICON_HEIGHT, ICON_PADDING, ICON_BACKGROUND, ICON_FOREGROUND
)

# Fonts tried in order; the first one with CJK coverage wins
FONT_CANDIDATES = (
    "PingFang.ttc",
    "msyh.ttc",
    "NotoSansCJK-Regular.ttc",
    "wqy-microhei.ttc",
    "DejaVuSans.ttf",
)
FONT_SIZE = 40


def _load_font():
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, FONT_SIZE)
        except OSError:
            continue
    logging.debug("No TrueType font found, using Pillow default font")
    return ImageFont.load_default()


class TrayManager:
    """Manages the tray icon, its rendered word and its menu."""

    def __init__(self):
        self.tray_icon: Optional[Icon] = None
        self._display_text = APP_NAME
        self._font = None

        # Callbacks
        self._on_advance: Optional[Callable[[], None]] = None
        self._on_retreat: Optional[Callable[[], None]] = None
        self._on_quit: Optional[Callable[[], None]] = None

    def configure_callbacks(self,
                            on_advance: Optional[Callable[[], None]] = None,
                            on_retreat: Optional[Callable[[], None]] = None,
                            on_quit: Optional[Callable[[], None]] = None):
        """Configure callback functions for tray menu actions.

        Args:
            on_advance: Called when user clicks Next word (or the icon itself)
            on_retreat: Called when user clicks Previous word
            on_quit: Called when user clicks Quit
        """
        self._on_advance = on_advance
        self._on_retreat = on_retreat
        self._on_quit = on_quit

    @property
    def display_text(self) -> str:
        return self._display_text

    def render_image(self, text: str) -> Image.Image:
        """Render the display text as a tray icon image.

        Args:
            text: Word (and translation) to show

        Returns:
            RGBA image, ICON_HEIGHT tall and as wide as the text needs
        """
        if self._font is None:
            self._font = _load_font()

        text = text or APP_NAME
        measure = ImageDraw.Draw(Image.new('RGBA', (1, 1)))
        try:
            left, top, right, bottom = measure.textbbox((0, 0), text, font=self._font)
        except UnicodeEncodeError:
            # Bitmap fallback font is latin-1 only
            text = text.encode('latin-1', 'replace').decode('latin-1')
            left, top, right, bottom = measure.textbbox((0, 0), text, font=self._font)
        width = max(ICON_HEIGHT, right - left + 2 * ICON_PADDING)

        image = Image.new('RGBA', (width, ICON_HEIGHT), color=ICON_BACKGROUND)
        draw = ImageDraw.Draw(image)
        y = (ICON_HEIGHT - (bottom - top)) // 2 - top
        draw.text((ICON_PADDING - left, y), text, fill=ICON_FOREGROUND, font=self._font)
        return image

    def _build_menu_items(self) -> list:
        """Build menu items list.

        Returns:
            List of MenuItem objects
        """
        return [
            MenuItem(lambda item: self._display_text, None, enabled=False),
            Menu.SEPARATOR,
            MenuItem('Next word', lambda: self._on_advance() if self._on_advance else None, default=True),
            MenuItem('Previous word', lambda: self._on_retreat() if self._on_retreat else None),
            Menu.SEPARATOR,
            MenuItem('Quit', lambda: self._on_quit() if self._on_quit else None),
        ]

    def create(self) -> Icon:
        """Create and return the system tray icon.

        Returns:
            The pystray Icon object
        """
        menu = Menu(*self._build_menu_items())
        self.tray_icon = Icon(APP_NAME, self.render_image(self._display_text),
                              f"{APP_NAME} v{VERSION}", menu)
        return self.tray_icon

    def update_display(self, text: str):
        """Show new text in the tray icon, its tooltip and the menu."""
        self._display_text = text
        if not self.tray_icon:
            return
        self.tray_icon.icon = self.render_image(text)
        self.tray_icon.title = text
        self.tray_icon.update_menu()

    def notify(self, message: str, title: Optional[str] = None):
        """Show a desktop notification from the tray icon."""
        logging.info(f"Notice: {message}")
        if not self.tray_icon:
            return
        try:
            self.tray_icon.notify(message, title or APP_NAME)
        except Exception as e:
            # Not every pystray backend supports notifications
            logging.warning(f"Tray notification failed: {e}")

    def stop(self):
        """Stop and cleanup the tray icon."""
        if self.tray_icon:
            try:
                self.tray_icon.stop()
            except Exception as e:
                logging.warning(f"Error stopping tray: {e}")
            self.tray_icon = None
