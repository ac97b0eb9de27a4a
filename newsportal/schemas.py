"""
Schemas shared by every app
"""

from datetime import datetime

from ninja import Schema


class Message(Schema):
    message: str


class HealthOut(Schema):
    status: str
    timestamp: datetime
