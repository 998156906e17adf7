"""ASGI entrypoint for the VoiceFit API."""

from voicefit.api.app import create_app
from voicefit.containers import build_container

app = create_app(build_container())
