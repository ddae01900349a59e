"""Application configuration constants."""

from __future__ import annotations

APP_NAME = "Lumina"
APP_VERSION = "0.1.0"
ORG_NAME = "Lumina"

# Project defaults
DEFAULT_PROJECT_NAME = "Untitled"
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_FPS = 30
DEFAULT_PROJECT_DURATION = 45.0  # seconds

# Editing
DEFAULT_CLIP_DURATION = 5.0  # seconds, used by add-clip
SPLIT_GUARD_SEC = 0.1  # splits closer than this to a clip edge are rejected

# Playback
TICK_QUANTUM_SEC = 0.1  # timeline advance per scheduling tick
SEEK_TOLERANCE_SEC = 0.3  # drift allowed before the media source is re-seeked

# Clip colors per track kind
KIND_COLORS = {
    "video": "#3b82f6",
    "audio": "#10b981",
    "text": "#a855f7",
}

# Property bags given to freshly added clips
TEXT_DEFAULT_PROPERTIES = {"text": "New Text", "font_size": 60, "rotation": 0}
MEDIA_DEFAULT_PROPERTIES = {"opacity": 1, "scale": 1, "rotation": 0, "volume": 1}

# Persistence
PROJECT_EXTENSION = ".lumina.json"

# Advisory (Gemini)
GEMINI_MODEL = "gemini-2.5-flash"
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
ADVISORY_TIMEOUT_SEC = 30
