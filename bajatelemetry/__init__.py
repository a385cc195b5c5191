"""Telemetry packets, CAN decoding, radio scheduling, Bluetooth status and ground-station logging."""

__version__ = "0.1.0"
__all__ = ["packets", "can", "lora", "ble", "statemachine", "receiver"]