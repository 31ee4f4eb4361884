"""voicememo - record mono WAV memos and transcribe them with an external tool."""

__version__ = "0.1.0"
