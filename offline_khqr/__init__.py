# Offline KHQR generator: merchant form, payload builder, QR renderer and local recall.

__version__ = "0.1.0"
