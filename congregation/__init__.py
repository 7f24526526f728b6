"""Church administration core: rota service generation and dynamic forms."""

__version__ = "0.1.0"
