"""pi-kilo: a minimal raw-mode terminal text viewer."""

__version__ = "0.0.1"

from pi.kilo.buffer import LineBuffer, Row
from pi.kilo.config import Config
from pi.kilo.editor import CursorPosition, EditorSession, SessionState
from pi.kilo.errors import (
    DimensionQueryError,
    FileOpenError,
    KiloError,
    TerminalConfigError,
    TerminalReadError,
)
from pi.kilo.keys import ByteKey, Key, KeyDecoder, KeyEvent, SpecialKey, decode_all
from pi.kilo.render import FrameBuffer, Renderer, compose_frame
from pi.kilo.terminal import Dimensions, ProcessTerminal, RawMode, Terminal

__all__ = [
    "__version__",
    # Buffer
    "LineBuffer",
    "Row",
    # Configuration
    "Config",
    # Session
    "CursorPosition",
    "EditorSession",
    "SessionState",
    # Errors
    "DimensionQueryError",
    "FileOpenError",
    "KiloError",
    "TerminalConfigError",
    "TerminalReadError",
    # Keys
    "ByteKey",
    "Key",
    "KeyDecoder",
    "KeyEvent",
    "SpecialKey",
    "decode_all",
    # Rendering
    "FrameBuffer",
    "Renderer",
    "compose_frame",
    # Terminal
    "Dimensions",
    "ProcessTerminal",
    "RawMode",
    "Terminal",
]
