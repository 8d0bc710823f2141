"""
Inventory signals - publish committed stock changes for live lists.
"""
from apps.core import realtime

from .models import InventoryItem

realtime.track_model(InventoryItem)
