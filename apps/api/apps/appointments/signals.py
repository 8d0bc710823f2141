"""
Appointment signals - publish committed changes for live lists.
"""
from apps.core import realtime

from .models import Appointment

realtime.track_model(Appointment)
