# orrery/version.py
from __future__ import annotations
import os

SERVICE = "orrery"
# ORRERY_VERSION lets preview deploys report their build tag
VERSION = os.getenv("ORRERY_VERSION", "0.1.0")
