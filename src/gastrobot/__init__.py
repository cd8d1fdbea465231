"""gastrobot — cooking assistant grounded in Gastronogeek's videos."""

__version__ = "0.1.0"
