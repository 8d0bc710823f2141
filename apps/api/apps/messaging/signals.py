"""
Messaging signals - publish committed changes for live inboxes.
"""
from apps.core import realtime

from .models import Conversation, Message

realtime.track_model(Conversation)
realtime.track_model(Message)
